"""
Game tracker application package.

Layers, leaf first:

  app/repositories/  local persistence (the session token file).
  app/resources/     one class per REST resource; one method per endpoint.
  app/services/      session state: login, register, logout, restore.
  app/views/         UI state per screen: tagged list state, dialogs, forms.

``TrackerApp`` (in ``tracker.py``) is the integration point: it builds the
client, repository, session store and views from the config and exposes them
as public attributes (e.g. ``app.games_view``).
"""
