"""jamf-state: declarative desired-state reconciliation for Jamf Pro."""

__version__ = "0.3.0"
