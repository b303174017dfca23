# goblin

Game logic for two community mini-games:

- **Heist**: a player plans a heist, others join the crew, and the crew
  hits a target. Each crew member escapes, is apprehended or dies, and
  three quarters of the target's vault is shared out among the survivors.
- **Race**: members are assigned racers that move at different speeds.
  The race is run leg by leg and the first three finishers (win, place
  and show) are recorded. Race members keep a record of finishes, bets
  and earnings.

The package has no runtime dependencies. State lives in a
`goblin.store.DocumentStore`, an in-memory, thread-safe collection of
dictionary documents, and credits live in a `goblin.store.Ledger` built on
top of a store.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `goblin.store`: `DocumentStore` (`find_one`, `find_many`,
  `update_or_insert`, `delete`, `delete_many`), `Ledger` (`balance`,
  `deposit`, `withdraw`), `NotFoundError` and `InsufficientFundsError`.
- `goblin.heist.config`: `HeistConfig` and `get_config`, `read_config`,
  `write_config`. Defaults: bail 250, cost 1500, death timer 45 s,
  police alert 60 s, sentence 45 s, wait 60 s, theme `"clash"`.
- `goblin.heist.theme`: `Theme`, `HeistMessage`, the built-in
  `default_theme`, and `get_theme`, `get_themes`, `get_theme_names`,
  `read_theme`, `write_theme`.
- `goblin.heist.target`: `Target`, `default_targets`, `get_targets`,
  `select_target`, `recover_vaults` and `run_vault_updater`.
- `goblin.heist.member`: `GuildMember`, `HeistMember`, `MemberStatus`,
  `CriminalLevel`, `criminal_level_name` and `get_heist_member`.
- `goblin.heist.heist`: `Heist`, `HeistRegistry`, `HeistResult`,
  `HeistMemberResult`, `heist_checks` and the loot calculations.
- `goblin.heist.errors`: the heist errors and `format_duration`.
- `goblin.race.config`: `RaceConfig`, `get_config` and the race errors.
- `goblin.race.member`: `RaceMember` and `get_race_member`.
- `goblin.race.racer`: `Racer`, `default_racers` and `get_racers`.
- `goblin.race.race`: `Race`, `RaceRegistry`, `new_race_participant`
  and `move`.

## Heist example

```python
import random

from goblin.store import DocumentStore, Ledger
from goblin.heist.member import GuildMember, get_heist_member
from goblin.heist.heist import HeistRegistry

store = DocumentStore()
bank = Ledger(store)
bank.deposit("guild-1", "alice", 5000)
bank.deposit("guild-1", "bob", 5000)

registry = HeistRegistry()
heist = registry.new_heist(store, bank, GuildMember("guild-1", "alice", "Alice"))
heist.add_crew_member(store, bank, get_heist_member(store, GuildMember("guild-1", "bob", "Bob")))

result = heist.start(store, random.Random())
for member_result in result.all_results:
    print(member_result.status, member_result.stolen_credits, member_result.bonus_credits)

registry.end(store, heist)
```

`new_heist` and `add_crew_member` run `heist_checks`, which raises one of
the errors in `goblin.heist.errors` when a member cannot take part:
`AlreadyJoinedError`, `NotEnoughCreditsError`, `PoliceOnAlertError`,
`InJailError` or `DeadError`. A second heist in the same guild raises
`HeistInProgressError`, and starting with fewer than two crew members
raises `NotEnoughMembersError`.

`Heist.start` only works out the outcome. Charging the cost of entry,
paying out loot, updating each player's record (`HeistMember.apprehended`,
`died` or `escaped`) and emptying the vault (`Target.steal_from_vault`)
are left to the caller. `registry.end` puts the police on alert for the
configured time.

Targets recover 4% of their maximum vault per step. Call
`goblin.heist.target.recover_vaults(store)` for a single step, or run
`run_vault_updater(store, interval, stop_event)` in a background thread;
it steps once per interval (one minute by default) until the event is set.

## Race example

```python
import random

from goblin.store import DocumentStore
from goblin.race.race import RaceRegistry, new_race_participant
from goblin.race.member import get_race_member
from goblin.race.racer import get_racers

store = DocumentStore()
rng = random.Random()
racers = get_racers(store, "guild-1", "clash")

registry = RaceRegistry()
race = registry.get_race(store, "guild-1")
for member_id in ("alice", "bob", "carol"):
    member = get_race_member(store, "guild-1", member_id)
    race.add_racer(new_race_participant(member, racers, rng))

result = race.run_race(60, rng)
print(result.win.member.member_id, result.win_time)
registry.end(store, race)
```

Racers always start 100 units from the finish line; the `track_length`
argument of `run_race` does not change the simulation. Ties in finishing
time are broken at random.

## What the package does not do

- It is game logic only: there are no chat commands, buttons, message
  rendering or bot connection. Waiting for players to join, announcing
  results and muting channels are up to the application.
- Storage is in memory only. `DocumentStore` keeps nothing on disk, so all
  configurations, members, targets, themes and balances are lost when the
  process ends.
- The race game has no flow for opening a race to joiners or taking bets
  through a command; `RaceMember.place_bet` and `win_bet` record bets, and
  paying out prizes is left to the caller.