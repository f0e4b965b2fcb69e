"""
drbdflex - DRBD Manage backed volume provisioner

Provisions block-storage volumes for a cluster orchestrator by driving the
drbdmanage command-line tool:
- Resource lifecycle (define, assign, unassign, remove)
- Convergence polling with resume-all recovery
- Free-space pre-flight checks
- Device resolution, formatting and mounting
"""

__version__ = "0.1.0"
__author__ = "drbdflex Team"
