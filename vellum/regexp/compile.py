"""Compiling a parsed regular expression into a byte-level program."""

from vellum.regexp.inst import INST_SIZE, Inst, InstOp
from vellum.regexp.syntax import MAX_RUNE, Flags, Node, Op, simple_fold
from vellum.utf8 import Sequence, new_sequences

_EMPTY_ASSERTIONS = (Op.END_LINE, Op.BEGIN_LINE, Op.BEGIN_TEXT, Op.END_TEXT)
_WORD_BOUNDARIES = (Op.WORD_BOUNDARY, Op.NO_WORD_BOUNDARY)


class RegexpError(ValueError):
    """Base class for expressions that cannot become an automaton."""

    message = "invalid regular expression"

    def __init__(self, message: str = ""):
        super().__init__(message or self.message)


class NoEmptyError(RegexpError):
    """Zero width assertions are not supported."""

    message = "zero width assertions not allowed"


class NoWordBoundaryError(RegexpError):
    """Word boundaries are not supported."""

    message = "word boundaries are not allowed"


class NoLazyError(RegexpError):
    """Lazy quantifiers are not supported."""

    message = "lazy quantifiers are not allowed"


class CompiledTooBigError(RegexpError):
    """The compiled program exceeds the size limit."""

    message = "too many instructions"


class Compiler:
    """Turns a syntax tree into a list of instructions over UTF-8 bytes."""

    def __init__(self, size_limit: int):
        self.size_limit = size_limit
        self._insts: list[Inst] = []

    def compile(self, node: Node) -> list[Inst]:
        """Compile ``node`` and return the program, ending in a match."""
        self._insts = []
        self._c(node)
        self._insts.append(Inst(InstOp.MATCH))
        return self._insts

    @property
    def _top(self) -> int:
        return len(self._insts)

    def _c(self, node: Node) -> None:
        if node.flags & Flags.NON_GREEDY:
            raise NoLazyError()
        op = node.op
        if op in _EMPTY_ASSERTIONS:
            raise NoEmptyError()
        if op in _WORD_BOUNDARIES:
            raise NoWordBoundaryError()

        if op is Op.EMPTY_MATCH:
            return
        if op is Op.ANY_CHAR:
            self._c(Node(Op.CHAR_CLASS, flags=node.flags & Flags.FOLD_CASE,
                         runes=[0, MAX_RUNE]))
            return
        if op is Op.ANY_CHAR_NOT_NL:
            self._c(Node(Op.CHAR_CLASS, flags=node.flags & Flags.FOLD_CASE,
                         runes=[0, 0x09, 0x0B, MAX_RUNE]))
            return
        if op is Op.CHAR_CLASS:
            self._compile_class(node.runes)
            return
        if op is Op.CAPTURE:
            self._c(node.sub[0])
            return
        if op is Op.CONCAT:
            for sub in node.sub:
                self._c(sub)
            return
        if op is Op.ALTERNATE and not node.sub:
            return

        if op is Op.LITERAL:
            self._literal(node)
        elif op is Op.ALTERNATE:
            self._alternate(node.sub)
        elif op is Op.QUEST:
            split = self._empty_split()
            j1 = self._top
            self._c(node.sub[0])
            self._set_split(split, j1, self._top)
        elif op is Op.STAR:
            j1 = self._top
            split = self._empty_split()
            j2 = self._top
            self._c(node.sub[0])
            jmp = self._empty_jump()
            self._set_jump(jmp, j1)
            self._set_split(split, j2, self._top)
        elif op is Op.PLUS:
            j1 = self._top
            self._c(node.sub[0])
            split = self._empty_split()
            self._set_split(split, j1, self._top)
        elif op is Op.REPEAT:
            if self._repeat(node):
                return
        self._check_size()

    def _literal(self, node: Node) -> None:
        for r in node.runes:
            if node.flags & Flags.FOLD_CASE:
                runes = [r, r]
                folded = simple_fold(r)
                while folded != r:
                    runes += [folded, folded]
                    folded = simple_fold(folded)
                self._c(Node(Op.CHAR_CLASS, flags=Flags.FOLD_CASE, runes=runes))
            else:
                for seq in new_sequences(r, r):
                    self._compile_utf8_ranges(seq)

    def _alternate(self, subs: list[Node]) -> None:
        jumps = []
        for sub in subs[:-1]:
            split = self._empty_split()
            j1 = self._top
            self._c(sub)
            jumps.append(self._empty_jump())
            self._set_split(split, j1, self._top)
        self._c(subs[-1])
        end = self._top
        for jmp in jumps:
            self._set_jump(jmp, end)

    def _repeat(self, node: Node) -> bool:
        """Compile a counted repeat; True when it finished through a star."""
        sub = node.sub[0]
        for _ in range(node.min):
            self._c(sub)
        if node.max == -1:
            self._c(Node(Op.STAR, flags=node.flags, sub=node.sub, runes=node.runes))
            return True
        splits = []
        starts = []
        for _ in range(node.min, node.max):
            splits.append(self._empty_split())
            starts.append(self._top)
            self._c(sub)
        end = self._top
        for split, start in zip(splits, starts):
            self._set_split(split, start, end)
        return False

    def _check_size(self) -> None:
        if len(self._insts) * INST_SIZE > self.size_limit:
            raise CompiledTooBigError()

    def _compile_class(self, runes: list[int]) -> None:
        if not runes:
            return
        pairs = list(zip(runes[0::2], runes[1::2]))
        jumps = []
        for start, end in pairs[:-1]:
            split = self._empty_split()
            j1 = self._top
            self._compile_class_range(start, end)
            jumps.append(self._empty_jump())
            self._set_split(split, j1, self._top)
        self._compile_class_range(*pairs[-1])
        end = self._top
        for jmp in jumps:
            self._set_jump(jmp, end)

    def _compile_class_range(self, start: int, end: int) -> None:
        sequences = new_sequences(start, end)
        if not sequences:
            raise RegexpError("character class range has no encodable code points")
        jumps = []
        for seq in sequences[:-1]:
            split = self._empty_split()
            j1 = self._top
            self._compile_utf8_ranges(seq)
            jumps.append(self._empty_jump())
            self._set_split(split, j1, self._top)
        self._compile_utf8_ranges(sequences[-1])
        end_pc = self._top
        for jmp in jumps:
            self._set_jump(jmp, end_pc)

    def _compile_utf8_ranges(self, seq: Sequence) -> None:
        for r in seq:
            self._insts.append(Inst(InstOp.RANGE, range_start=r.start, range_end=r.end))

    def _empty_split(self) -> int:
        self._insts.append(Inst(InstOp.SPLIT))
        return self._top - 1

    def _empty_jump(self) -> int:
        self._insts.append(Inst(InstOp.JMP))
        return self._top - 1

    def _set_split(self, i: int, pc1: int, pc2: int) -> None:
        self._insts[i].split_a = pc1
        self._insts[i].split_b = pc2

    def _set_jump(self, i: int, pc: int) -> None:
        self._insts[i].to = pc