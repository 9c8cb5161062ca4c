"""Prompt templates sent to Gemini alongside the video bytes."""

RECIPE_JSON_SCHEMA = """{
  "title": "Recipe name",
  "description": "Detailed description",
  "cuisine": "Specific cuisine type",
  "difficulty": "Easy/Medium/Hard",
  "cookingTime": minutes,
  "ingredients": [
    {
      "name": "ingredient name exactly as shown in video",
      "amount": number or null if not shown,
      "unit": "exact unit mentioned or shown, or null",
      "notes": "specific preparation notes from video or null"
    }
  ],
  "instructions": [
    {
      "step": number,
      "description": "detailed step exactly as demonstrated in video",
      "timestamp": seconds when step starts in video or null,
      "duration": step duration in seconds or null
    }
  ],
  "nutrition": {
    "servings": number based on recipe shown or null,
    "calories": calculated per serving or null,
    "protein": grams per serving or null,
    "carbs": grams per serving or null,
    "fat": grams per serving or null,
    "fiber": grams per serving or null
  },
  "tags": ["tag1", "tag2"],
  "aiMetadata": {
    "detectedIngredients": ["list every ingredient shown or mentioned"],
    "detectedTechniques": ["list all cooking techniques demonstrated"],
    "confidenceScore": accuracy of analysis between 0 and 1,
    "suggestedHashtags": ["relevant hashtags based on actual video content"],
    "equipmentNeeded": ["all cooking equipment shown being used"],
    "skillLevel": "beginner/intermediate/advanced based on techniques shown",
    "totalTime": total minutes shown or estimated from video,
    "prepTime": preparation minutes shown or estimated,
    "cookTime": cooking minutes shown or estimated,
    "estimatedCost": {
      "min": minimum cost in cents based on ingredients shown,
      "max": maximum cost in cents based on ingredients shown,
      "currency": "USD"
    }
  }
}"""

CHUNK_ANALYSIS_PROMPT = """Analyze this video and determine if it's a cooking/recipe video. A video should be considered a cooking video if it shows ANY of the following:
1. Food preparation or cooking process
2. Recipe instructions or steps
3. Cooking techniques being demonstrated
4. Ingredients being used or shown
5. Final cooked dish being presented

Return ONLY a JSON response with the following structure, ensuring all details are accurate and specific to this video:

""" + RECIPE_JSON_SCHEMA + """

Be generous in classification - if there's any food preparation or cooking content at all, classify it as a cooking video.
If you're unsure, err on the side of classifying it as a cooking video with lower confidence rather than rejecting it."""

CONTINUATION_PREFIX = (
    "This is a continuation of the previous video segment. "
    "Continue the analysis, focusing on: "
)

PARTIAL_VIDEO_PREFIX = (
    "This is not the complete video. Analyze what you can see in this segment. "
)

PRESCREEN_PROMPT = """Analyze this video and determine if it's a cooking/recipe video. Return ONLY a JSON object with no additional text or formatting, following this exact structure:
{
  "isCookingVideo": boolean,
  "confidence": number between 0 and 1,
  "reason": "detailed explanation",
  "detectedContent": {
    "hasCookingInstructions": boolean,
    "hasIngredients": boolean,
    "hasRecipeSteps": boolean,
    "identifiedDish": "name if identified",
    "cookingTechniquesShown": ["technique1", "technique2"]
  }
}

Requirements for a valid cooking video (confidence should be at least 0.85):
1. Must show food preparation or cooking process
2. Should have clear steps or instructions
3. Should show ingredients being used
4. Must demonstrate cooking techniques"""

FULL_ANALYSIS_PROMPT = """Watch this cooking video carefully and provide a detailed, unique analysis specific to this exact video. Return ONLY a JSON response with the following structure, ensuring all details are accurate and specific to this video:

""" + RECIPE_JSON_SCHEMA + """

Important:
1. Only include ingredients and steps actually shown in this specific video
2. Be precise with measurements and timings seen in the video
3. Base difficulty and times on what's demonstrated
4. List equipment that's actually used in this video
5. Ensure all details are unique to this particular recipe"""
