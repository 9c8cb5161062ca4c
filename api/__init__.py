"""HTTP surface of the ReelMeals video analysis service."""
