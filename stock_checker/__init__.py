"""Stock price checker with per-IP deduplicated likes."""
