"""
Artist Service - performer roster and booking status.
"""

import logging
from typing import Any, Dict

from sqlalchemy import or_

from database.models import Artist
from services.base import (
    BaseService, Field, assign_fields, body_must_be_object, db_operation, validate_fields
)
from services.results import not_found_result, success_result, validation_error_result
from validators import (
    validate_choice, validate_email, validate_phone, validate_string_length, validate_url
)

logger = logging.getLogger(__name__)

ARTIST_STATUSES = ['Confirmed', 'Pending', 'Inquiry', 'Cancelled']
SOCIAL_PLATFORMS = ['website', 'instagram', 'facebook', 'twitter', 'spotify', 'youtube', 'soundcloud', 'tiktok']


def _validate_social_media(value):
    if not isinstance(value, dict):
        return False, "Social media must be an object"
    for platform, url in value.items():
        if platform not in SOCIAL_PLATFORMS:
            return False, f"Unknown social media platform: {platform}"
        is_valid, error = validate_url(url)
        if not is_valid:
            return False, f"{platform}: {error}"
    return True, None


ARTIST_FIELDS = {
    'name': Field('name', lambda v: validate_string_length(v, 1, 100), required=True),
    'genre': Field('genre', lambda v: validate_string_length(v, 1, 50), required=True),
    'location': Field('location', lambda v: validate_string_length(v, 0, 100)),
    'email': Field('email', validate_email, parse=lambda v: v.strip().lower()),
    'phone': Field('phone', validate_phone),
    'bio': Field('bio', lambda v: validate_string_length(v, 0, 5000)),
    'image': Field('image', validate_url),
    'status': Field('status', lambda v: validate_choice(v, ARTIST_STATUSES), nullable=False),
    'socialMedia': Field('social_media', _validate_social_media, nullable=False),
}


class ArtistService(BaseService):

    source = 'artists'

    @db_operation
    def list_artists(self, query: Dict[str, Any]):
        with self._session() as session:
            q = session.query(Artist)
            if query.get('status'):
                q = q.filter(Artist.status == query['status'])
            if query.get('genre'):
                q = q.filter(Artist.genre.ilike(query['genre']))
            if query.get('location'):
                q = q.filter(Artist.location.ilike(f"%{query['location']}%"))
            if query.get('search'):
                search = f"%{query['search']}%"
                q = q.filter(or_(Artist.name.ilike(search), Artist.bio.ilike(search)))
            q = q.order_by(Artist.name.desc() if self._sort_direction(query) else Artist.name.asc())
            return self._paged_result(q, query)

    @db_operation
    def get_artist(self, artist_id: str):
        with self._session() as session:
            artist = session.get(Artist, artist_id)
            if not artist:
                return not_found_result('Artist')
            return success_result(artist.to_dict(), source=self.source)

    @db_operation
    def create_artist(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, ARTIST_FIELDS)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            artist = Artist(status='Inquiry', social_media={})
            assign_fields(artist, data, ARTIST_FIELDS)
            session.add(artist)
            session.flush()
            logger.info(f"Created artist: {artist.id}")
            return success_result(artist.to_dict(), source=self.source)

    @db_operation
    def update_artist(self, artist_id: str, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, ARTIST_FIELDS, partial=True)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            artist = session.get(Artist, artist_id)
            if not artist:
                return not_found_result('Artist')
            changes = assign_fields(artist, data, ARTIST_FIELDS)
            session.flush()
            logger.info(f"Updated artist: {artist_id} ({', '.join(changes) or 'no changes'})")
            return success_result(artist.to_dict(), source=self.source)

    @db_operation
    def delete_artist(self, artist_id: str):
        with self._session() as session:
            artist = session.get(Artist, artist_id)
            if not artist:
                return not_found_result('Artist')
            session.delete(artist)
            logger.info(f"Deleted artist: {artist_id}")
            return success_result({'deleted': True}, source=self.source)
