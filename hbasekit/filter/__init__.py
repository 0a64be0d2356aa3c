"""HBase scan filters, comparators and the filter expression parser."""