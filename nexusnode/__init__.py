"""Prover node toolkit: tasks, difficulty, system metrics, messages and dashboard."""

__version__ = "0.10.13"