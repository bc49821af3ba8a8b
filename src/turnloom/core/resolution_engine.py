import math
from dataclasses import dataclass, field
from typing import Dict, List

from turnloom.core.rules_engine import RulesEngine
from turnloom.models import (
    AmbientConditions,
    CombatActionTaken,
    CombatEnded,
    CombatMove,
    CraftingRequest,
    DegreeOfSuccess,
    DynamicItemCreated,
    GameEvent,
    GeoPoint,
    InventoryItem,
    ItemAdded,
    ItemGrant,
    ItemRemoved,
    ItemType,
    ItemUsed,
    ItemUseRequest,
    ItemXpGained,
    JournalEntryAdded,
    MomentumUpdated,
    MoneyChanged,
    PhysiologyChanged,
    PhysiologyNeed,
    PlayerAction,
    PlayerStatChanged,
    ServiceRequest,
    SkillCheckResolved,
    SkillXpAwarded,
    TextNotice,
    TimeProgressed,
    TravelExecuted,
    TravelMode,
    TravelRequest,
    WorldState,
    XpGained,
)

EARTH_RADIUS_KM = 6371.0

# Physiology decay per minute of action / per point of energy spent
HUNGER_DECAY_PER_MINUTE = 0.05
HUNGER_DECAY_PER_ENERGY = 0.1
THIRST_DECAY_PER_MINUTE = 0.08
THIRST_DECAY_PER_ENERGY = 0.08

SKILL_XP_ON_SUCCESS = 10
SKILL_XP_ON_FAILURE = 3
PLAYER_XP_ON_SUCCESS = 15
ITEM_XP_ON_SUCCESS = 5

METRO_FARE = 1.90
COMBAT_SKILL = "combat"
FLEE_SKILL = "athletics"
FLEE_DIFFICULTY = 60

CONSUMABLE_TYPES = (ItemType.CONSUMABLE, ItemType.FOOD)


# ============================================================
# HELPERS
# ============================================================

def round_half_up(value: float) -> int:
    """Rounds .5 up (towards +inf), unlike Python's banker's rounding."""
    return math.floor(value + 0.5)


def round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def distance_km(origin: GeoPoint, destination: GeoPoint) -> float:
    """Great-circle (haversine) distance between two points."""
    lat1, lat2 = math.radians(origin.latitude), math.radians(destination.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(destination.longitude - origin.longitude)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def travel_costs(mode: TravelMode, distance: float) -> tuple[int, float, int]:
    """Returns (minutes, money, energy) for a journey of `distance` km."""
    match mode:
        case TravelMode.WALK:
            return round_half_up(distance * 12), 0.0, round_half_up(distance * 5) + 1
        case TravelMode.METRO:
            return round_half_up(distance * 4 + 10), METRO_FARE, round_half_up(distance) + 1
        case TravelMode.TAXI:
            return round_half_up(distance * 2 + 5), round2(5 + distance * 1.5), round_half_up(distance * 0.5)
        case _:
            raise ValueError(f"Unknown travel mode: {mode}")


@dataclass
class _TurnLedger:
    """Running values, so that final_value fields account for earlier events in the same turn."""
    stats: Dict[str, int]
    physiology: Dict[PhysiologyNeed, float]
    money: float
    events: List[GameEvent] = field(default_factory=list)

    @classmethod
    def from_state(cls, state: WorldState) -> "_TurnLedger":
        player = state.player
        return cls(
            stats=player.stats.model_dump(),
            physiology={need: player.physiology.get(need) for need in PhysiologyNeed},
            money=player.money,
        )

    def emit(self, event: GameEvent) -> None:
        self.events.append(event)

    def notice(self, text: str) -> None:
        self.emit(TextNotice(text=text))

    def change_stat(self, stat: str, change: int) -> None:
        final = max(0, min(100, self.stats.get(stat, 0) + change))
        self.stats[stat] = final
        self.emit(PlayerStatChanged(stat=stat, change=change, final_value=final))

    def change_physiology(self, need: PhysiologyNeed, change: float) -> None:
        final = max(0.0, min(100.0, self.physiology[need] + change))
        self.physiology[need] = final
        self.emit(PhysiologyChanged(need=need, change=change, final_value=final))

    def spend(self, amount: float, description: str) -> None:
        self.money = round2(self.money - amount)
        self.emit(MoneyChanged(amount=-amount, description=description, final_balance=self.money))


# ============================================================
# RESOLUTION ENGINE
# ============================================================

class ResolutionEngine:
    """
    Turns a chosen PlayerAction into an ordered list of GameEvents.
    No LLM calls and no state mutation here - this is pure game logic.
    The only source of chance is RulesEngine.roll_d100().
    """

    def __init__(self, rules_engine: RulesEngine):
        self.rules = rules_engine

    def resolve(
        self,
        state: WorldState,
        action: PlayerAction,
        ambient: AmbientConditions | None = None,
    ) -> List[GameEvent]:
        ambient = ambient or AmbientConditions()
        ledger = _TurnLedger.from_state(state)

        ledger.emit(JournalEntryAdded(text=action.text, entry_type=action.kind.value))

        # Combat takes precedence over everything else
        if state.current_enemy is not None:
            self._resolve_combat(state, action, ledger)
            return ledger.events

        if action.travel:
            self._resolve_travel(state, action.travel, ledger)
        elif action.service:
            self._resolve_service(state, action.service, ledger)
        elif action.item_use:
            self._resolve_item_use(state, action.item_use, ledger)
        elif action.crafting:
            self._resolve_crafting(state, action.crafting, ledger)

        self._apply_generic_effects(action, ledger)

        if action.skill_check:
            self._resolve_skill_check(state, action, ambient, ledger)

        return ledger.events

    # ------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------

    def _resolve_travel(self, state: WorldState, request: TravelRequest, ledger: _TurnLedger) -> None:
        origin = request.origin or state.player.location
        distance = distance_km(origin, request.destination)
        minutes, cost, energy = travel_costs(request.mode, distance)

        if ledger.money < cost or ledger.stats["energy"] < energy:
            ledger.notice(
                f"You cannot travel to {request.destination.name} by {request.mode.value}: "
                f"it needs {cost:.2f} money and {energy} energy."
            )
            return

        if cost > 0:
            ledger.spend(cost, f"Transport by {request.mode.value}")
        ledger.emit(TravelExecuted(
            origin_name=origin.name,
            destination=request.destination,
            mode=request.mode,
            duration=minutes,
            distance_km=round2(distance),
        ))
        ledger.change_stat("energy", -energy)

    def _resolve_service(self, state: WorldState, request: ServiceRequest, ledger: _TurnLedger) -> None:
        poi = state.get_poi(request.poi_id)
        service = poi.get_service(request.service_id) if poi else None
        if poi is None or service is None:
            ledger.notice("That service is not available here.")
            return

        if ledger.money < service.cost:
            ledger.notice(f"Not enough money for {service.name} ({service.cost:.2f}).")
            return

        ledger.spend(service.cost, f"{service.name} at {poi.name}")
        if service.grants_item:
            ledger.emit(ItemAdded(item=service.grants_item))

    def _resolve_item_use(self, state: WorldState, request: ItemUseRequest, ledger: _TurnLedger) -> None:
        item = state.player.find_item(request.instance_id)
        if item is None:
            ledger.notice("Item not found.")
            return

        ledger.emit(ItemUsed(instance_id=item.instance_id, item_name=item.name, description=f"Used {item.name}"))
        if item.item_type not in CONSUMABLE_TYPES:
            return

        ledger.emit(ItemRemoved(item_id=item.item_id, instance_id=item.instance_id, item_name=item.name, quantity=1))
        for stat, change in item.stat_effects.items():
            ledger.change_stat(stat, change)
        for need, change in item.physiology_effects.items():
            ledger.change_physiology(need, change)

    def _resolve_crafting(self, state: WorldState, request: CraftingRequest, ledger: _TurnLedger) -> None:
        # Reserve one stack per ingredient slot; nothing is emitted until every slot is filled
        reserved: List[tuple[InventoryItem, int]] = []
        for requirement in request.ingredients:
            stack = self._find_ingredient(state.player.inventory, requirement.name, requirement.quantity, reserved)
            if stack is None:
                ledger.notice(f"Cannot craft {request.recipe_name}: missing {requirement.name}.")
                return
            reserved.append((stack, requirement.quantity))

        for stack, quantity in reserved:
            ledger.emit(ItemRemoved(
                item_id=stack.item_id, instance_id=stack.instance_id, item_name=stack.name, quantity=quantity
            ))

        result = request.result
        ledger.emit(DynamicItemCreated(item=ItemGrant(
            item_id=result.item_id,
            name=result.name,
            quantity=result.quantity,
            item_type=result.item_type,
            description=result.description,
            stat_effects=result.stat_effects,
        )))
        for skill, amount in request.skill_xp.items():
            ledger.emit(SkillXpAwarded(skill=skill, amount=amount))
        ledger.notice(f"You crafted {result.name}.")

    @staticmethod
    def _find_ingredient(
        inventory: List[InventoryItem],
        name: str,
        quantity: int,
        reserved: List[tuple[InventoryItem, int]],
    ) -> InventoryItem | None:
        taken = {stack.instance_id for stack, _ in reserved}
        needle = name.lower()
        for item in inventory:
            if item.instance_id in taken:
                continue
            if needle in item.name.lower() and item.quantity >= quantity:
                return item
        return None

    def _resolve_combat(self, state: WorldState, action: PlayerAction, ledger: _TurnLedger) -> None:
        player = state.player
        enemy = state.current_enemy
        move = action.combat_move or CombatMove.ATTACK
        enemy_health = enemy.health

        if move == CombatMove.ATTACK:
            result = self._check(
                ledger, COMBAT_SKILL, player.skills.get(COMBAT_SKILL, 0),
                self.rules.calculate_modifier(ledger.stats["dexterity"]), 50 + enemy.defense,
            )
            damage = 0
            if result.success:
                damage = self.calculate_damage(
                    ledger.stats["strength"], ledger.stats["dexterity"],
                    self._weapon_damage(player.inventory), enemy.defense,
                    critical=result.degree == DegreeOfSuccess.CRITICAL_SUCCESS,
                )
                enemy_health = max(0, enemy_health - damage)
            ledger.emit(CombatActionTaken(
                attacker=player.name, target="enemy", move=move, damage=damage, new_health=enemy_health
            ))
            if enemy_health <= 0:
                ledger.emit(CombatEnded(winner="player", outcome="victory"))
                return

        elif move == CombatMove.FLEE:
            result = self._check(
                ledger, FLEE_SKILL, player.skills.get(FLEE_SKILL, 0),
                self.rules.calculate_modifier(ledger.stats["dexterity"]), FLEE_DIFFICULTY,
            )
            ledger.emit(CombatActionTaken(
                attacker=player.name, target="enemy", move=move, damage=0, new_health=enemy_health
            ))
            if result.success:
                ledger.emit(CombatEnded(winner=None, outcome="fled"))
                return

        else:
            ledger.emit(CombatActionTaken(
                attacker=player.name, target="enemy", move=move, damage=0, new_health=enemy_health
            ))

        # Enemy counterattack
        damage = max(1, enemy.attack - ledger.stats["constitution"] // 10)
        if move == CombatMove.DEFEND:
            damage = max(1, damage // 2)
        player_health = max(0, ledger.stats["health"] - damage)
        ledger.stats["health"] = player_health
        ledger.emit(CombatActionTaken(
            attacker=enemy.name, target="player", move=CombatMove.ATTACK, damage=damage, new_health=player_health
        ))
        if player_health <= 0:
            ledger.emit(CombatEnded(winner="enemy", outcome="defeat"))

    def _check(self, ledger: _TurnLedger, skill: str, skill_value: int, stat_modifier: int, difficulty: int) -> SkillCheckResolved:
        result = self.rules.perform_check(skill_value, stat_modifier, 0, difficulty, self.rules.roll_d100())
        event = SkillCheckResolved(
            skill=skill,
            success=result.success,
            degree=result.degree_of_success,
            roll=result.roll,
            total=result.total_achieved,
            difficulty=result.difficulty_target,
            margin=result.margin,
        )
        ledger.emit(event)
        return event

    @staticmethod
    def calculate_damage(strength: int, dexterity: int, weapon_damage: int, defense: int, critical: bool = False) -> int:
        """Deterministic damage: never below 1, x1.5 on a critical hit."""
        damage = max(1.0, strength / 5 + dexterity / 10 + weapon_damage - defense / 2)
        if critical:
            damage *= 1.5
        return max(1, round_half_up(damage))

    @staticmethod
    def _weapon_damage(inventory: List[InventoryItem]) -> int:
        weapons = [item.stat_effects.get("damage", 0) for item in inventory if item.item_type == ItemType.WEAPON]
        return max(weapons, default=0)

    # ------------------------------------------------------------
    # Generic effects / skill checks
    # ------------------------------------------------------------

    def _apply_generic_effects(self, action: PlayerAction, ledger: _TurnLedger) -> None:
        time_cost = action.time_cost
        energy_cost = action.energy_cost

        ledger.emit(TimeProgressed(minutes=time_cost))
        if energy_cost > 0:
            ledger.change_stat("energy", -energy_cost)

        hunger_decay = time_cost * HUNGER_DECAY_PER_MINUTE + energy_cost * HUNGER_DECAY_PER_ENERGY
        thirst_decay = time_cost * THIRST_DECAY_PER_MINUTE + energy_cost * THIRST_DECAY_PER_ENERGY
        ledger.change_physiology(PhysiologyNeed.HUNGER, -hunger_decay)
        ledger.change_physiology(PhysiologyNeed.THIRST, -thirst_decay)

    def _resolve_skill_check(
        self,
        state: WorldState,
        action: PlayerAction,
        ambient: AmbientConditions,
        ledger: _TurnLedger,
    ) -> None:
        player = state.player
        check = action.skill_check

        weather_modifier, reason = self.rules.weather_modifier(check.skill, ambient.weather)
        if weather_modifier:
            ledger.notice(reason)

        contributing = [item for item in player.inventory if item.skill_bonuses.get(check.skill, 0) > 0]
        item_bonus = sum(item.skill_bonuses[check.skill] for item in contributing)

        momentum = player.momentum
        situational = (
            check.situational_modifier
            + weather_modifier
            + item_bonus
            + momentum.momentum_bonus
            + momentum.desperation_bonus
        )
        stat_modifier = self.rules.calculate_modifier(ledger.stats[check.stat.value]) if check.stat else 0

        result = self.rules.perform_check(
            skill_value=player.skills.get(check.skill, 0),
            stat_modifier=stat_modifier,
            situational_modifier=situational,
            difficulty_target=check.difficulty,
            roll=self.rules.roll_d100(),
        )
        ledger.emit(SkillCheckResolved(
            skill=check.skill,
            success=result.success,
            degree=result.degree_of_success,
            roll=result.roll,
            total=result.total_achieved,
            difficulty=result.difficulty_target,
            margin=result.margin,
        ))
        ledger.emit(MomentumUpdated(momentum=self.rules.update_momentum(momentum, result.success)))
        ledger.emit(SkillXpAwarded(
            skill=check.skill,
            amount=SKILL_XP_ON_SUCCESS if result.success else SKILL_XP_ON_FAILURE,
        ))

        if not result.success:
            return
        ledger.emit(XpGained(amount=PLAYER_XP_ON_SUCCESS))
        for item in contributing:
            ledger.emit(ItemXpGained(instance_id=item.instance_id, item_name=item.name, xp=ITEM_XP_ON_SUCCESS))
