"""User-facing error messages shared by endpoints and services."""


class AuthMessages:
    MISSING_FIELDS = "Email, username and password are required"
    EMAIL_TAKEN = "Email already registered"
    USERNAME_TAKEN = "Username already taken"
    INVALID_CREDENTIALS = "Invalid credentials"
    INVALID_TOKEN = "Invalid token"
    EXPIRED_TOKEN = "Token expired"
    USER_NOT_FOUND = "User not found"
    INACTIVE_USER = "Inactive user"
    INVALID_TIMEZONE = "Unknown timezone"
    REGISTRATION_FAILED = "Unable to create user"
    PASSWORD_TOO_LONG = "Password must be at most 72 bytes"


class CampaignMessages:
    NAME_REQUIRED = "Campaign name is required"
    NOT_FOUND = "Campaign not found"
    ACCESS_DENIED = "Access to this campaign denied"
    MASTER_REQUIRED_EDIT = "Only the master can edit the campaign"
    MASTER_REQUIRED_ARCHIVE = "Only the master can archive the campaign"
    MASTER_REQUIRED_MEMBERS = "Only the master can manage members"
    ARCHIVED = "Campaign archived successfully"
    MEMBER_IDENTIFIER_REQUIRED = "Username or email is required"
    MEMBER_NOT_FOUND = "Member not found"
    ALREADY_MEMBER = "User is already a member of this campaign"
    LAST_MASTER = "A campaign must keep at least one master"
    MEMBER_REMOVED = "Member removed"


class CharacterMessages:
    NOT_FOUND = "Character not found"
    MEMBERSHIP_REQUIRED = "You must be a campaign member to create a character"
    ACCESS_DENIED = "Access denied"
    CAMPAIGN_ACCESS_DENIED = "Access to this campaign denied"
    EDIT_DENIED = "Only the owner or the master can edit the character"
    DELETE_DENIED = "Only the owner can delete the character"
    DELETED = "Character deleted successfully"


class SessionMessages:
    INVALID_FRAME = "Invalid frame"
    UNKNOWN_EVENT = "Unknown event"
    CAMPAIGN_REQUIRED = "campaignId is required"
    NOT_A_MEMBER = "Not a member of this campaign"
    NOT_IN_ROOM = "Join the campaign room before sending"
    INVALID_DICE = "Unsupported dice"
