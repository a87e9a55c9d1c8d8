from collab.common.enum import BaseEnum

PROJECT_PK_ABBREV = 'proj'

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000
LOCATION_MAX_LENGTH = 200


class ProjectStatusEnum(BaseEnum):
    DRAFT = 'draft'
    PLANNED = 'planned'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
