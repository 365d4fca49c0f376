"""Domain layer for haulbook application.

Services live in their own modules (``haulbook.domain.bill`` and so on) and
are imported from there; this package module stays import-free so that the
database layer can import ``haulbook.domain.entities`` without a cycle.
"""
