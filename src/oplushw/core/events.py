"""Well-known event type constants.

Defined centrally so publishers and subscribers reference the same strings.
"""

# --- Alert slider ---------------------------------------------------------

SLIDER_MODE_APPLIED = "slider.mode.applied"
SLIDER_ZEN_COMMIT_TIMED_OUT = "slider.zen.commit_timed_out"
SLIDER_DIALOG_SHOWN = "slider.dialog.shown"

# --- Gestures -------------------------------------------------------------

GESTURE_ACTION_PERFORMED = "gesture.action.performed"

# --- Audio ----------------------------------------------------------------

MEDIA_MUTE_CHANGED = "audio.media.mute_changed"

# --- Service lifecycle ----------------------------------------------------

SERVICE_STARTED = "service.started"
SERVICE_STOPPED = "service.stopped"
SERVICE_REGISTRATION_FAILED = "service.registration_failed"
