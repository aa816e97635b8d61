"""
keysyms.py - Key values and modifier masks used by the composition core

The values are the X11 keysyms that IBus delivers in process_key_event()
(IBus.KEY_* / IBus.ModifierType.*). They are kept here as plain integers so
that the composition state machine can be imported and tested without the
IBus typelib.
"""

# modifier masks (IBus.ModifierType)
SHIFT_MASK      = 1 << 0
LOCK_MASK       = 1 << 1
CONTROL_MASK    = 1 << 2
MOD1_MASK       = 1 << 3    # usually Alt
RELEASE_MASK    = 1 << 30

# printable ASCII keysyms coincide with their code points
space       = 0x020
comma       = 0x02c
period      = 0x02e
question    = 0x03f
KEY_0       = 0x030
KEY_9       = 0x039

BackSpace   = 0xff08
Tab         = 0xff09
Return      = 0xff0d
Escape      = 0xff1b
Up          = 0xff52
Down        = 0xff54
KP_Enter    = 0xff8d

PRINTABLE_MIN = 0x20
PRINTABLE_MAX = 0x7e

# names accepted by the console simulator
NAME_TO_KEYVAL = {
    'space': space,
    'BackSpace': BackSpace,
    'Tab': Tab,
    'Return': Return,
    'Escape': Escape,
    'Up': Up,
    'Down': Down,
    'KP_Enter': KP_Enter,
}


def is_printable(keyval):
    return PRINTABLE_MIN <= keyval <= PRINTABLE_MAX


def keyval_to_char(keyval):
    '''
    Returns the character for a printable ASCII keyval, None otherwise.
    '''
    if(is_printable(keyval)):
        return chr(keyval)
    return None


def keyval_name(keyval):
    for name, value in NAME_TO_KEYVAL.items():
        if value == keyval:
            return name
    c = keyval_to_char(keyval)
    if c is not None:
        return c
    return hex(keyval)
