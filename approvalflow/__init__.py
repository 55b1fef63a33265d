"""approvalflow - declaratively configured, role-gated approval workflows"""

__version__ = "1.0.0"
