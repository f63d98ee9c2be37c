from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List

from app.core.dependencies import get_current_image_store
from app.core.exceptions import ImageNotFoundError
from app.schemas import generated_image as schemas_generated_image
from app.services.image_store import ImageStore

router = APIRouter()

@router.get("/", response_model=List[schemas_generated_image.GeneratedImage])
def read_generated_images(store: ImageStore = Depends(get_current_image_store)):
    return store.list()

@router.post("/", response_model=schemas_generated_image.GeneratedImage, status_code=status.HTTP_201_CREATED)
def create_generated_image(
    image: schemas_generated_image.GeneratedImageCreate,
    store: ImageStore = Depends(get_current_image_store),
):
    return store.save(image)

@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_generated_image(image_id: str, store: ImageStore = Depends(get_current_image_store)):
    try:
        store.delete(image_id)
    except ImageNotFoundError:
        raise HTTPException(status_code=404, detail="Image not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
