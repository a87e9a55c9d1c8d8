MEMBERSHIP_PK_ABBREV = 'pmem'

INVITATION_SENT_MESSAGE = 'Invitation sent'
INVITATION_ACCEPTED_MESSAGE = 'Invitation accepted'
