"""Pure timestamp extraction, format resolution and bucketing."""
