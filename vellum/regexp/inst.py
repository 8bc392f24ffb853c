"""Instructions of a compiled regular expression program."""

import enum
from collections.abc import Sequence
from dataclasses import dataclass

# Approximate size of one instruction, used for the compiled size limit.
INST_SIZE = 40


class InstOp(enum.IntEnum):
    MATCH = 0
    JMP = 1
    SPLIT = 2
    RANGE = 3


@dataclass
class Inst:
    """One program instruction; only the fields of its op are meaningful."""

    op: InstOp = InstOp.MATCH
    to: int = 0
    split_a: int = 0
    split_b: int = 0
    range_start: int = 0
    range_end: int = 0

    def __str__(self) -> str:
        if self.op is InstOp.JMP:
            return f"JMP: {self.to}"
        if self.op is InstOp.SPLIT:
            return f"SPLIT: {self.split_a} - {self.split_b}"
        if self.op is InstOp.RANGE:
            return f"RANGE: {self.range_start:x} - {self.range_end:x}"
        return "MATCH"


def format_program(program: Sequence[Inst]) -> str:
    """Render a program one numbered instruction per line."""
    return "\n" + "".join(f"{i} {inst}\n" for i, inst in enumerate(program))