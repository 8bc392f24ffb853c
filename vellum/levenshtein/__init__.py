"""Levenshtein automata that match strings within an edit distance."""