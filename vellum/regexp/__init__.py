"""Regular expressions parsed and compiled to byte-level DFAs."""