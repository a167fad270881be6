from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from ..core import UserStore, get_current_username, get_store
from ..core.accounts import login_user, merge_client_data, register_user
from ..game import (
    Catalog,
    abandon,
    add_habit,
    check_in,
    harvest,
    plant,
    research_recipe,
)
from .schemas import (
    AbandonResponse,
    AddHabitRequest,
    CheckInRequest,
    CheckInResponse,
    CredentialsRequest,
    CropResponse,
    HabitResponse,
    HarvestResponse,
    LastLoginResponse,
    LoginResponse,
    PlantCropRequest,
    ResearchRequest,
    SessionResponse,
)

router = APIRouter()


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


# --- Accounts ---

@router.post("/register")
def register(request: CredentialsRequest, store: UserStore = Depends(get_store)):
    register_user(store, request.username, request.password, datetime.now())
    # Registering does not log in, the client goes to the login page
    return {"success": True, "message": "Registered, please log in"}


@router.post("/login", response_model=LoginResponse)
def login(request: CredentialsRequest, store: UserStore = Depends(get_store)):
    token, record = login_user(store, request.username, request.password, datetime.now())
    return LoginResponse(token=token, username=record.username, max_habits=record.max_habits)


@router.post("/auto-login", response_model=SessionResponse)
def auto_login(username: str = Depends(get_current_username), store: UserStore = Depends(get_store)):
    record = store.load(username)
    record.last_login = datetime.now()
    store.save(record)
    return SessionResponse(username=username, max_habits=record.max_habits)


@router.post("/logout")
def logout(username: str = Depends(get_current_username), store: UserStore = Depends(get_store)):
    record = store.load(username)
    record.last_logout = datetime.now()
    store.save(record)
    return {"success": True, "message": "Logged out"}


@router.get("/last-login", response_model=LastLoginResponse)
def last_login(username: str = Depends(get_current_username), store: UserStore = Depends(get_store)):
    record = store.load(username)
    return LastLoginResponse(
        last_login=record.last_login or record.created_at,
        created_at=record.created_at,
    )


# --- Reference data ---

@router.get("/crops")
def list_crops(username: str = Depends(get_current_username), catalog: Catalog = Depends(get_catalog)):
    return {"success": True, "crops": catalog.crops_payload()}


@router.get("/recipes")
def list_recipes(username: str = Depends(get_current_username), catalog: Catalog = Depends(get_catalog)):
    return {"success": True, "recipes": catalog.recipes_payload()}


# --- User data ---

@router.get("/user-data")
def user_data(username: str = Depends(get_current_username), store: UserStore = Depends(get_store)):
    record = store.load(username)
    return {"success": True, "data": record.public_dict()}


@router.post("/save-data")
def save_data(
    updates: Dict[str, Any] = Body(...),
    username: str = Depends(get_current_username),
    store: UserStore = Depends(get_store),
):
    record = store.load(username)
    store.save(merge_client_data(record, updates))
    return {"success": True}


@router.get("/research-history")
def research_history(username: str = Depends(get_current_username), store: UserStore = Depends(get_store)):
    record = store.load(username)
    history = {
        recipe_id: state.model_dump(mode="json", by_alias=True, exclude_none=True)
        for recipe_id, state in record.research_history.items()
    }
    return {"success": True, "history": history}


# --- Habits ---

@router.post("/add-habit", response_model=HabitResponse)
def add_habit_endpoint(
    request: AddHabitRequest,
    username: str = Depends(get_current_username),
    store: UserStore = Depends(get_store),
):
    record = store.load(username)
    habit = add_habit(record, request.habit_name, datetime.now())
    store.save(record)
    return HabitResponse(habit=habit)


@router.post("/checkin-habit", response_model=CheckInResponse)
def checkin_habit(
    request: CheckInRequest,
    username: str = Depends(get_current_username),
    store: UserStore = Depends(get_store),
    catalog: Catalog = Depends(get_catalog),
):
    record = store.load(username)
    habit, habit_streak = check_in(record, request.habit_id, datetime.now(), catalog)
    store.save(record)
    return CheckInResponse(habit=habit, habit_streak=habit_streak)


# --- Crops ---

@router.post("/plant-crop", response_model=CropResponse)
def plant_crop(
    request: PlantCropRequest,
    username: str = Depends(get_current_username),
    store: UserStore = Depends(get_store),
    catalog: Catalog = Depends(get_catalog),
):
    record = store.load(username)
    crop = plant(record, request.crop_id, datetime.now(), catalog)
    store.save(record)
    return CropResponse(crop=crop)


@router.post("/abandon-crop", response_model=AbandonResponse)
def abandon_crop(username: str = Depends(get_current_username), store: UserStore = Depends(get_store)):
    record = store.load(username)
    crop = abandon(record, datetime.now())
    store.save(record)
    return AbandonResponse(abandoned_crop=crop)


@router.post("/harvest-crop", response_model=HarvestResponse)
def harvest_crop(
    username: str = Depends(get_current_username),
    store: UserStore = Depends(get_store),
    catalog: Catalog = Depends(get_catalog),
):
    record = store.load(username)
    definition = harvest(record, datetime.now(), catalog)
    store.save(record)
    return HarvestResponse(harvested_amount=definition.harvest_amount, storage=record.storage)


# --- Recipes ---

@router.post("/research-recipe")
def research_recipe_endpoint(
    request: ResearchRequest,
    username: str = Depends(get_current_username),
    store: UserStore = Depends(get_store),
    catalog: Catalog = Depends(get_catalog),
):
    record = store.load(username)
    outcome = research_recipe(record, request.recipe_id, request.used_ingredients, datetime.now(), catalog)
    store.save(record)

    recipe = outcome.recipe
    if outcome.success:
        return {
            "success": True,
            "recipe": {
                "id": recipe.id,
                "name": recipe.name,
                "icon": recipe.icon,
                "description": recipe.hints[0] if recipe.hints else None,
                "ingredients": [
                    {"cropId": ing.crop_id, "quantity": ing.quantity} for ing in recipe.ingredients
                ],
            },
            "storage": record.storage,
            "maxHabits": record.max_habits,
        }

    return {
        "success": False,
        "message": "Research failed, keep exploring!",
        "clue": outcome.clue,
        "hint": outcome.hint,
        "attempts": outcome.attempts,
        "progress": outcome.progress,
    }
