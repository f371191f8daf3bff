import pandas as pd
from fuzzywuzzy import fuzz, process

from nutrilife.models.schemas import Recipe


def fuzzy_search_recipes(recipes: list[Recipe], query: str, threshold: int = 70, limit: int = 15) -> list[Recipe]:
    """Fuzzy search on saved recipe names, best matches first.

    Args:
        recipes: The saved recipe collection
        query: The search term to match against recipe names (e.g. "lentil soup")
        threshold: Minimum similarity score from 0 to 100 (default: 70)
        limit: Maximum number of recipes returned
    """
    if not recipes or not query.strip():
        return []

    df = pd.DataFrame([r.model_dump() for r in recipes])
    matches = process.extract(query, df["recipe_name"], scorer=fuzz.token_set_ratio, limit=len(df))
    matched_indices = [idx for (name, score, idx) in matches if score >= threshold]

    matched_df = df.loc[matched_indices].head(limit)
    return [Recipe.model_validate(row) for row in matched_df.to_dict(orient='records')]
