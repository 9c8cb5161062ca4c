"""Code shared between the ReelMeals API and the analysis worker."""

__version__ = "1.0.0"
