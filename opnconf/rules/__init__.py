"""Rule cloner: duplicate filter rules onto other interfaces."""

from opnconf.rules.cloner import clone_rule, find_rule
from opnconf.rules.models import CloneResult, FirewallRule

__all__ = [
    "clone_rule",
    "find_rule",
    "CloneResult",
    "FirewallRule",
]
