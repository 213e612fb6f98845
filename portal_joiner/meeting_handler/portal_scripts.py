"""
Portal-specific DOM selectors and JavaScript for the join flow.

This module centralizes the selectors of:
- The calendar surface (view picker, events)
- The join modal
- The meeting window (pre-join and in-call controls)

Note: the portal and the meeting client are updated by their vendors, so
selectors may need periodic maintenance.
"""

# =============================================================================
# DOM SELECTORS
# =============================================================================

PORTAL_SELECTORS = {
    # -------------------------------------------------------------------------
    # Calendar Surface
    # -------------------------------------------------------------------------

    # Bootstrap-select button that opens the view list
    "view_picker": 'button[data-id="calendarpicker"]',

    # View list once open
    "view_menu": "div.dropdown-menu.show",

    # "Day" entry of the view list
    "day_option": "a#bs-select-1-3",

    # FullCalendar event entries and their parts
    "event": "a.fc-daygrid-event",
    "event_time": ".fc-event-time",
    "event_title": ".fc-event-title",

    # -------------------------------------------------------------------------
    # Join Modal
    # -------------------------------------------------------------------------

    "join_modal": "#notification",
    "join_modal_button": "#notification-join",

    # -------------------------------------------------------------------------
    # Meeting Window
    # -------------------------------------------------------------------------

    # "Continue on this browser"
    "continue_on_web": 'button[data-tid="joinOnWeb"]',

    # "Join now" on the pre-join screen
    "join_now": "button#prejoin-join-button",

    # In-call microphone toggle
    "microphone": "button#microphone-button",
}


# =============================================================================
# JAVASCRIPT
# =============================================================================

# Reads every rendered event. Called through eval_on_selector_all.
EXTRACT_EVENTS_JS = """
(nodes, parts) => nodes.map((node) => {
    const timeNode = node.querySelector(parts.time);
    const titleNode = node.querySelector(parts.title);
    return {
        time: timeNode ? timeNode.textContent.trim() : "",
        title: titleNode ? titleNode.textContent.trim() : "",
        href: node.getAttribute("href") || ""
    };
})
"""

# Scrolls the event with the given href into view and clicks it.
CLICK_EVENT_LINK_JS = """
(href) => {
    const eventElement = Array.from(document.querySelectorAll('a[href]'))
        .find((node) => node.getAttribute('href') === href);
    if (!eventElement) {
        return false;
    }
    eventElement.scrollIntoView();
    eventElement.click();
    return true;
}
"""

# Clicks the element if it is still in the DOM. Returns whether it clicked.
CLICK_IF_PRESENT_JS = """
(selector) => {
    const element = document.querySelector(selector);
    if (element) {
        element.click();
        return true;
    }
    return false;
}
"""


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_selector(element_type: str) -> str:
    """
    Get the selector for a specific element type.

    Args:
        element_type: Key from PORTAL_SELECTORS dict

    Returns:
        CSS selector

    Raises:
        KeyError: If the element type is unknown
    """
    return PORTAL_SELECTORS[element_type]
