"""Cell-block compression codecs: the codec interface and a snappy codec."""