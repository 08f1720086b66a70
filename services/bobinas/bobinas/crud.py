"""
CRUD (Create, Read, Update, Delete) operations for the Bobinas service.

This module contains all database operations for bobinas and users.
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from . import models

def get_bobina(db: Session, bobina_id: str) -> Optional[models.Bobina]:
    """
    Retrieve a single bobina by ID.

    Args:
        db: Database session
        bobina_id: ID of the bobina to retrieve

    Returns:
        Bobina object or None if not found
    """
    return db.query(models.Bobina).filter(models.Bobina.id == bobina_id).first()

def get_bobinas(db: Session) -> List[models.Bobina]:
    """
    Retrieve every bobina, newest first.

    Args:
        db: Database session

    Returns:
        List of Bobina objects ordered by creation time descending
    """
    return (
        db.query(models.Bobina)
        .order_by(models.Bobina.created_at.desc(), models.Bobina.id.desc())
        .all()
    )

def create_bobina(db: Session, data: Dict[str, Any]) -> models.Bobina:
    """
    Create a new bobina in the database.

    Args:
        db: Database session
        data: Column values, including owner_id

    Returns:
        Created Bobina object

    Raises:
        sqlalchemy.exc.IntegrityError: If the code is already taken
    """
    db_bobina = models.Bobina(**data)
    db.add(db_bobina)
    db.commit()
    db.refresh(db_bobina)
    return db_bobina

def update_bobina(db: Session, bobina_id: str, data: Dict[str, Any]) -> Optional[models.Bobina]:
    """
    Update an existing bobina.

    Args:
        db: Database session
        bobina_id: ID of the bobina to update
        data: Column values to write; id and owner_id are never written

    Returns:
        Updated Bobina object or None if not found
    """
    db_bobina = get_bobina(db, bobina_id)
    if db_bobina is None:
        return None

    for key, value in data.items():
        if key in ("id", "owner_id", "created_at"):
            continue
        setattr(db_bobina, key, value)

    db.commit()
    db.refresh(db_bobina)
    return db_bobina

def set_bobina_photo(db: Session, bobina_id: str, photo_url: Optional[str]) -> Optional[models.Bobina]:
    """
    Replace or clear the photo of a bobina, leaving every other column as stored.

    Returns:
        Updated Bobina object or None if not found
    """
    updated = (
        db.query(models.Bobina)
        .filter(models.Bobina.id == bobina_id)
        .update({models.Bobina.photo_url: photo_url}, synchronize_session=False)
    )
    db.commit()
    if not updated:
        return None
    return get_bobina(db, bobina_id)

def delete_bobina(db: Session, bobina_id: str) -> bool:
    """
    Delete a bobina from the database.

    Args:
        db: Database session
        bobina_id: ID of the bobina to delete

    Returns:
        True if bobina was deleted, False if not found
    """
    db_bobina = get_bobina(db, bobina_id)
    if db_bobina is None:
        return False

    db.delete(db_bobina)
    db.commit()
    return True

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    """
    Retrieve a user by email address.

    Args:
        db: Database session
        email: Email address to search for

    Returns:
        User object or None if not found
    """
    return db.query(models.User).filter(models.User.email == email).first()

def create_user(db: Session, name: str, email: str, password_hash: str) -> models.User:
    """
    Create a new user in the database.

    Args:
        db: Database session
        name: Display name
        email: Email address
        password_hash: Already hashed password

    Returns:
        Created User object
    """
    db_user = models.User(name=name, email=email, password_hash=password_hash, is_active=True)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
