"""The heist game: configuration, themes, targets, members, crews and outcomes."""