"""tmux status-bar segment for the day's counter.

The segment is a powerline-style block: a left-pointing arrow in the band
color, the tally on the band background, then an arrow back to the status
bar background.

    tie:     success == fail   colour66 with colour234 text
    success: success >  fail   colour237 with colour255 text
    fail:    success <  fail   colour196 with colour234 text

Colour numbers are tmux's 256-colour palette indices.
"""

from enum import Enum

from buildstreak.core.counters import Counter

# Status bar background the segment is drawn against
STATUS_BG = 234

# Powerline left arrow (U+E0B2)
SEPARATOR = ""

TIE_COLOUR = 66
SUCCESS_COLOUR = 237
SUCCESS_FG = 255
FAIL_COLOUR = 196


class Band(Enum):
    """Colour band selected by comparing success with fail."""

    TIE = "tie"
    SUCCESS = "success"
    FAIL = "fail"


# band -> (segment colour, text colour)
BAND_COLOURS: dict[Band, tuple[int, int]] = {
    Band.TIE: (TIE_COLOUR, STATUS_BG),
    Band.SUCCESS: (SUCCESS_COLOUR, SUCCESS_FG),
    Band.FAIL: (FAIL_COLOUR, STATUS_BG),
}


def select_band(counter: Counter) -> Band:
    """Pick the band for a counter.

    Args:
        counter: The day's tally.

    Returns:
        TIE, SUCCESS or FAIL.
    """
    if counter.success > counter.fail:
        return Band.SUCCESS
    if counter.success < counter.fail:
        return Band.FAIL
    return Band.TIE


def render(counter: Counter) -> str:
    """Format a counter as a tmux status-bar segment.

    Args:
        counter: The day's tally.

    Returns:
        tmux format string embedding both counts.
    """
    colour, fg = BAND_COLOURS[select_band(counter)]
    return (
        f"#[fg=colour{colour},bg=colour{STATUS_BG}]{SEPARATOR}"
        f"#[bg=colour{colour},fg=colour{fg}] {counter.success} | {counter.fail} "
        f"#[fg=colour{STATUS_BG},bg=colour{colour}]{SEPARATOR}"
    )
