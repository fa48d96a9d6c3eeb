"""ClaimFlow: claim lifecycle, exposure and depreciation engine."""

__version__ = "1.0.0"
