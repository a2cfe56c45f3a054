"""Subtraction of one signature tree from another."""

from sigdelta.subtract.members import MemberExistenceChecker, provided_method_names, writer_name
from sigdelta.subtract.subtractor import Subtractor, subtract

__all__ = [
    "MemberExistenceChecker",
    "Subtractor",
    "provided_method_names",
    "subtract",
    "writer_name",
]
