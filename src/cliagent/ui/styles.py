"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout: transcript on top, optional log panel, then the status bar and
input at the bottom.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Transcript - Primary Focus Area
   ============================================ */
#transcript {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus {
        border: round $primary;
    }

    &:focus-within {
        border: round $primary-lighten-1;
    }
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 14;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
    scrollbar-gutter: stable;

    &:focus {
        border: round $warning;
    }
}

/* ============================================
   Bottom Bar - Status + Input
   ============================================ */
#bottom-bar {
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#status-bar {
    height: 2;
    padding: 0 1;
    background: $surface;
    color: $foreground;
}

InputBar {
    height: 3;
    margin-top: 1;
}

#chat-input {
    width: 1fr;
    border: round $primary 60%;
    background: $panel;

    &:focus {
        border: round $primary;
    }
}

#send-btn {
    width: 10;
    min-width: 8;
    margin: 0 0 0 1;
}

/* ============================================
   Transcript Entries
   ============================================ */
.entry {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
    background: transparent;

    & .entry-header {
        height: auto;
        text-style: bold;
    }

    & .entry-body {
        height: auto;
        color: $foreground;
    }
}

.entry-welcome {
    border-left: tall $accent;
    background: $accent 8%;

    & .entry-header {
        color: $accent;
    }
}

.entry-user {
    border-left: tall $success;
    background: $success 8%;

    & .entry-header {
        color: $success;
    }

    &:hover {
        background: $success 12%;
    }
}

.entry-agent {
    border-left: tall $primary;
    background: $primary 8%;

    & .entry-header {
        color: $primary;
    }

    &.-streaming {
        border-left: tall $accent;
    }
}

.entry-tool {
    border-left: tall $warning;
    background: $warning 6%;

    & .entry-header {
        color: $warning;
    }

    &:hover {
        background: $warning 12%;
    }

    &.-collapsed {
        margin: 0;
    }
}

.entry-thought {
    border-left: tall $secondary;
    background: $secondary 6%;

    & .entry-header {
        color: $secondary;
        text-style: italic;
    }

    & .entry-body {
        color: $text-muted;
    }

    &:hover {
        background: $secondary 12%;
    }

    &.-collapsed {
        margin: 0;
    }
}

.entry-notice {
    margin: 0;

    & .entry-header {
        display: none;
    }

    & .entry-body {
        color: $text-muted;
        text-style: italic;
    }
}

/* Error-flagged entries override the kind colors */
.entry.-error {
    border-left: tall $error;
    background: $error 10%;

    & .entry-header {
        color: $error;
    }

    & .entry-body {
        color: $error;
    }
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
        background: $primary 12%;
        color: $foreground;
    }

    &.-error {
        border: tall $error;
        background: $error 12%;
        color: $foreground;
    }

    &.-warning {
        border: tall $warning;
        background: $warning 12%;
        color: $foreground;
    }
}

/* ============================================
   Scrollbar Styling
   ============================================ */
* {
    scrollbar-background: $panel;
    scrollbar-color: $surface-lighten-1;
    scrollbar-color-hover: $primary 50%;
    scrollbar-color-active: $primary;
    scrollbar-size: 1 1;
}

/* ============================================
   Header / Footer
   ============================================ */
Header {
    background: $panel;
    color: $foreground;
    dock: top;
    height: 1;
}

HeaderTitle {
    color: $primary;
    text-style: bold;
}

Footer {
    background: $panel;
    height: auto;
}

FooterKey {
    background: $surface;
    color: $foreground;
    padding: 0 1;

    & > .footer-key--key {
        background: $primary 80%;
        color: $background;
        text-style: bold;
    }

    &:hover {
        background: $primary 15%;
    }
}
"""
