"""Identity core: users, passwords, tokens, login and role guard."""
