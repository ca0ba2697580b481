"""Product catalog service.

Products and categories joined by a many-to-many association, with the
repositories that keep those associations consistent.
"""

__version__ = "0.1.0"
