"""Keyboard shortcut definitions for CardioDashboard.

Every dashboard action reachable from a button or tab also has a shortcut.
"""
from PySide6.QtGui import QKeySequence

KEYBINDINGS = {
    # Backend operations
    "op_generate_signal": QKeySequence("Ctrl+G"),
    "op_train_model": QKeySequence("Ctrl+T"),
    "op_compute_risk": QKeySequence("Ctrl+R"),
    "op_render_chart": QKeySequence("Ctrl+P"),

    # Channel tabs
    "channel_normal": QKeySequence("Alt+1"),
    "channel_abnormal": QKeySequence("Alt+2"),

    # Application
    "dismiss_error": QKeySequence("Esc"),
    "app_quit": QKeySequence.StandardKey.Quit,  # Ctrl+Q
    "help_show": QKeySequence.StandardKey.HelpContents,  # F1
}

KEYBINDING_DESCRIPTIONS = {
    "op_generate_signal": "Generate synthetic ECG data",
    "op_train_model": "Train the risk model",
    "op_compute_risk": "Calculate heart failure risk for the active channel",
    "op_render_chart": "Fetch the rendered ECG chart",
    "channel_normal": "Show the normal ECG channel",
    "channel_abnormal": "Show the abnormal ECG channel",
    "dismiss_error": "Dismiss the current error",
    "app_quit": "Exit application",
    "help_show": "Show keyboard shortcuts help",
}

ACTION_GROUPS = {
    "Operations": [
        "op_generate_signal",
        "op_train_model",
        "op_compute_risk",
        "op_render_chart",
    ],
    "Channels": [
        "channel_normal",
        "channel_abnormal",
    ],
    "Application": [
        "dismiss_error",
        "app_quit",
        "help_show",
    ],
}


def get_keysequence(action: str) -> QKeySequence:
    """Get QKeySequence for an action, or an empty sequence if unknown."""
    keybinding = KEYBINDINGS.get(action)
    if keybinding is None:
        return QKeySequence()

    if isinstance(keybinding, QKeySequence.StandardKey):
        return QKeySequence(keybinding)

    return keybinding


def get_description(action: str) -> str:
    return KEYBINDING_DESCRIPTIONS.get(action, "")


def get_shortcut_text(action: str) -> str:
    """Formatted shortcut text for display, e.g. "Ctrl+G"."""
    seq = get_keysequence(action)
    return seq.toString(QKeySequence.SequenceFormat.NativeText) if seq else ""


def get_help_text() -> str:
    """Multi-line help text listing all shortcuts by group."""
    lines = []
    for group_name, actions in ACTION_GROUPS.items():
        lines.append(f"\n{group_name}:")
        for action in actions:
            shortcut = get_shortcut_text(action)
            if shortcut:
                lines.append(f"  {shortcut:15} - {get_description(action)}")
    return "\n".join(lines)
