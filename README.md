# vellum

Pure Python building blocks for finite state transducers and the automata
used to search them. Requires Python 3.10 or later and nothing outside the
standard library.

## What is inside

- `vellum.pack`: the packed integer helpers `delta_addr`, `encode_pack_size`,
  `decode_pack_size`, `encode_num_trans` and `read_packed_uint`.
- `vellum.writer`: `Writer(stream, buffer_size=4096)` buffers writes to a
  binary stream and counts every byte it accepts in `counter`.
  `write_packed_uint(value)` writes a value in as few little-endian bytes as
  `packed_size(value)` says it needs.
- `vellum.merge_iterator`: `MergeIterator` walks several sorted key/value
  iterators as one, resolving duplicate keys with `merge_min`, `merge_max`,
  `merge_sum` or a function of your own.
- `vellum.utf8`: `new_sequences(start, end)` turns a range of code points into
  the byte-range `Sequence`s that match their UTF-8 encodings, never
  including surrogates.
- `vellum.levenshtein`: `LevenshteinAutomatonBuilder` builds byte-level DFAs
  that accept every string within a given edit distance of a query.
- `vellum.regexp`: `Regexp` compiles a regular expression into a byte-level
  DFA.

Both kinds of automaton answer the same small set of calls: `start()`,
`accept(state, b)`, `is_match(state)`, `can_match(state)` and
`will_always_match(state)`.

## Installation

```
pip install .
```

## Fuzzy matching

```python
from vellum.levenshtein.automaton import LevenshteinAutomatonBuilder

builder = LevenshteinAutomatonBuilder(1, False)
dfa = builder.build_dfa("cat", 1)

state = dfa.start()
for b in "cats".encode():
    state = dfa.accept(state, b)
print(dfa.is_match(state))   # True
print(dfa.eval(b"ca"))       # Exact(distance=1)
```

Multi-byte UTF-8 characters count as one edit. Building the builder grows
quickly in cost with the maximum distance, so build it once and reuse it
across queries. A query that would need more than 10000 states raises
`TooManyStatesError` from `vellum.levenshtein.parametric_dfa`.

## Regular expressions

```python
from vellum.regexp.regexp import Regexp

r = Regexp("wat.r")
state = r.start()
for b in b"water":
    state = r.accept(state, b)
print(r.is_match(state))   # True
```

The expression must match the whole key. Perl syntax is accepted, including
`(?i)` case folding. Zero-width assertions, word boundaries and lazy
quantifiers are rejected with `NoEmptyError`, `NoWordBoundaryError` and
`NoLazyError` from `vellum.regexp.compile`; a program over the size limit
(10 MiB by default, the second argument of `Regexp`) raises
`CompiledTooBigError`, and bad syntax raises `ParseError` from
`vellum.regexp.syntax`.

## UTF-8 ranges

```python
from vellum.utf8 import new_sequences

for seq in new_sequences(0, 0xFFFF):
    print(seq)
# [0-7F]
# [C2-DF][80-BF]
# [E0][A0-BF][80-BF]
# ...
```

## Merging sorted iterators

```python
from vellum.merge_iterator import MergeIterator, merge_sum

merged = MergeIterator([first, second], merge_sum)
for key, value in merged:
    ...
merged.close()
```

Each input provides `current()`, `next()`, `seek(key)` and `close()`;
`current()` returns `(None, 0)` once the input is exhausted, and `next()` and
`seek()` raise `IteratorDone` at the end. Values for a key found in several
inputs reach the merge function in the order of the inputs.

## What it does not do

The package holds the pieces of a transducer library, not the transducer
itself: it does not build, save, open or query FST files, and it has no
command-line program.

## Tests

```
pip install ".[test]"
pytest
```