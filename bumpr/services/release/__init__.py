"""Release workflow: version, manifest, tag, history, notes, pull request."""
