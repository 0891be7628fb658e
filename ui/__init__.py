"""UI module: HTTP server and static front-end for the video FAQ player."""
