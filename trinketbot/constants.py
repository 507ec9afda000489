"""Protocol constants and fixed option sets."""

from __future__ import annotations

# Gateway opcodes
OP_DISPATCH = 0
OP_HEARTBEAT = 1
OP_IDENTIFY = 2
OP_RESUME = 6
OP_RECONNECT = 7
OP_INVALID_SESSION = 9
OP_HELLO = 10
OP_HEARTBEAT_ACK = 11

# Close codes after which the session may not be resumed
NON_RESUMABLE_CLOSE_CODES = frozenset({4007, 4009})
# Close codes after which reconnecting is pointless
FATAL_CLOSE_CODES = frozenset({4004, 4010, 4011, 4012, 4013, 4014})
# Close code used when we drop a zombied connection ourselves; anything
# other than 1000/1001 keeps the session resumable.
ZOMBIE_CLOSE_CODE = 4000

INTENT_GUILDS = 1 << 0

# Interaction types
INTERACTION_PING = 1
INTERACTION_APPLICATION_COMMAND = 2
INTERACTION_MESSAGE_COMPONENT = 3
INTERACTION_AUTOCOMPLETE = 4
INTERACTION_MODAL_SUBMIT = 5

# Interaction callback types
CALLBACK_CHANNEL_MESSAGE = 4
CALLBACK_MODAL = 9

MESSAGE_FLAG_EPHEMERAL = 1 << 6
PERMISSION_ADMINISTRATOR = 1 << 3

# Component types
COMPONENT_ACTION_ROW = 1
COMPONENT_BUTTON = 2
COMPONENT_STRING_SELECT = 3
COMPONENT_TEXT_INPUT = 4
COMPONENT_LABEL = 18
COMPONENT_FILE_UPLOAD = 19

BUTTON_PRIMARY = 1
BUTTON_SECONDARY = 2
BUTTON_DANGER = 4

EMBED_COLOR = 0xE0AD76

# Component custom ids
CREATE_LISTING_BUTTON = "create_marketplace_listing"
CONTINUE_BUTTON = "mp_continue"
ISO_ADD_BUTTON = "add_iso_item"
ISO_REMOVE_BUTTON = "remove_iso_item"
ISO_EDIT_BUTTON = "edit_iso_item"
ISO_SUBMIT_FORM = "mp_iso_submit"
ISO_EDIT_FORM = "mp_iso_edit"
ISO_REMOVE_FORM = "mp_iso_remove"

SETUP_MARKETPLACE_COMMAND = "setup_marketplace"
SETUP_ISO_COMMAND = "setup_iso"

CONFIRM_TOKEN = "YES"

PAYMENT_OPTIONS = [
    ("PayPal G&S", "PayPal G&S"),
    ("Venmo G&S", "Venmo G&S"),
    ("Other", "Other"),
]
SHIPPING_OPTIONS = [
    ("Included in price", "included"),
    ("Additional (buyer pays)", "additional"),
]
PACKAGING_OPTIONS = [
    ("Box sealed", "Box sealed"),
    ("Box resealed", "Box resealed"),
    ("No box", "No box"),
    ("Tags attached", "Tags attached"),
    ("Tags detached", "Tags detached"),
    ("No tags", "No tags"),
    ("Other (see notes)", "Other (see notes)"),
]
CONDITION_OPTIONS = [
    ("Sealed", "Sealed"),
    ("Opened", "Opened"),
    ("New", "New"),
    ("Other (see notes)", "Other (see notes)"),
]
