"""Prover tasks handed out by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from Crypto.Hash import keccak


def combine_proof_hashes(hashes: Iterable[str]) -> str:
    """Combine proof hashes into one Keccak-256 hex digest of their concatenation.

    An empty sequence gives an empty string.
    """
    hash_list = list(hashes)
    if not hash_list:
        return ""
    digest = keccak.new(digest_bits=256)
    for item in hash_list:
        digest.update(item.encode("utf-8"))
    return digest.hexdigest()


@dataclass
class Task:
    """A unit of proving work assigned by the orchestrator."""

    task_id: str
    program_id: str
    # Legacy single input, kept for backward compatibility.
    public_inputs: bytes
    public_inputs_list: list[bytes] = field(default_factory=list)
    task_type: Any = None
    # Difficulty actually assigned by the server.
    difficulty: Any = None

    @classmethod
    def from_input(
        cls,
        task_id: str,
        program_id: str,
        public_inputs: bytes,
        task_type: Any,
        difficulty: Any,
    ) -> "Task":
        """Build a task holding a single public input."""
        data = bytes(public_inputs)
        return cls(
            task_id=task_id,
            program_id=program_id,
            public_inputs=data,
            public_inputs_list=[data],
            task_type=task_type,
            difficulty=difficulty,
        )

    def all_inputs(self) -> list[bytes]:
        """Every public input of the task, in order."""
        return self.public_inputs_list

    def __str__(self) -> str:
        return (
            f"Task ID: {self.task_id}, Program ID: {self.program_id}, "
            f"Inputs: {len(self.public_inputs_list)}"
        )