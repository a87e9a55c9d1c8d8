from collab.common.enum import BaseEnum


class UserRoleEnum(BaseEnum):
    """
    Creative role picked at signup, carried in the provider's user metadata
    """

    PHOTOGRAPHER = 'photographer'
    MODEL = 'model'
    STYLIST = 'stylist'
    MAKEUP_ARTIST = 'makeup_artist'
    HAIR_STYLIST = 'hair_stylist'
    VIDEOGRAPHER = 'videographer'
    CREATIVE_DIRECTOR = 'creative_director'
    BRAND_REP = 'brand_rep'
    UNKNOWN = 'unknown'


ADMIN_USERS_PATH = '/auth/v1/admin/users'
JWT_ALGORITHMS = ['HS256']
