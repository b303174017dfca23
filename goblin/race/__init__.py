"""The race game: configuration, racers, members, bets and race simulation."""