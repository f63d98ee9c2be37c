from sqlalchemy.orm import Session
from app.models import generated_image as models_generated_image
from app.schemas import generated_image as schemas_generated_image

def get_generated_image(db: Session, user_id: str, image_id: str):
    return db.query(models_generated_image.GeneratedImage).filter(
        models_generated_image.GeneratedImage.id == image_id,
        models_generated_image.GeneratedImage.user_id == user_id,
    ).first()

def get_generated_images(db: Session, user_id: str):
    return db.query(models_generated_image.GeneratedImage).filter(
        models_generated_image.GeneratedImage.user_id == user_id
    ).order_by(models_generated_image.GeneratedImage.timestamp.desc()).all()

def create_generated_image(db: Session, user_id: str, image: schemas_generated_image.GeneratedImageCreate):
    db_image = models_generated_image.GeneratedImage(
        user_id=user_id,
        session_id=image.session_id,
        prompt=image.prompt,
        image_url=image.image_url,
        text_content=image.text_content,
        timestamp=image.timestamp,
        settings=image.settings.model_dump(by_alias=True),
    )
    db.add(db_image)
    db.commit()
    db.refresh(db_image)
    return db_image

def delete_generated_image(db: Session, user_id: str, image_id: str):
    db_image = get_generated_image(db, user_id, image_id)
    if db_image:
        db.delete(db_image)
        db.commit()
    return db_image
