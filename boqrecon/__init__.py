"""BOQRecon - Reconcile bills of quantities against drawing measurements."""

__version__ = "0.1.0"
