# WordRush: multiplayer race to find words in a shared six-letter pool.
