from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from nutrilife.core.security import get_active_session
from nutrilife.models.schemas import Recipe
from nutrilife.services.session_controller import SessionController
from nutrilife.tools.recipe_search import fuzzy_search_recipes

router = APIRouter(
    prefix="/recipes",
    tags=["My Recipes"]
)


@router.get("")
def list_recipes(session: SessionController = Depends(get_active_session)):
    return {"recipes": session.state.recipes}


@router.post("", response_class=JSONResponse)
def save_recipe(recipe: Recipe, session: SessionController = Depends(get_active_session)):
    """Save a recipe to the collection. Names are unique; duplicates are ignored."""
    if session.save_recipe(recipe):
        return JSONResponse(
            status_code=201,
            content={"saved": True, "message": "Recipe saved!", "count": len(session.state.recipes)},
        )
    return {"saved": False, "message": "You already have this recipe saved.", "count": len(session.state.recipes)}


@router.get("/search")
def search_recipes(
    query: str = Query(min_length=1),
    threshold: int = Query(default=70, ge=0, le=100),
    session: SessionController = Depends(get_active_session),
):
    return {"recipes": fuzzy_search_recipes(session.state.recipes, query, threshold=threshold)}
