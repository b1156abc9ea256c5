"""Exam preparation backend: timed mock-test attempts and exam results."""
