"""AI move selection and the game session that drives it."""
