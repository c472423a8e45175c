"""
Daily challenge catalog.

Static reference data for "7 minutos más allá del miedo": the missions,
the weekday schedule and the achievement table. Nothing here is mutated
at runtime; per-user state lives in the models.
"""

import enum
from typing import Dict, List, Optional


class MissionType(str, enum.Enum):
    """Kinds of mission; achievements count completions per type."""
    HERO = 'hero'
    CALM = 'calm'
    SCRIPTS = 'scripts'
    SELFCARE = 'selfcare'
    SUPPORT = 'support'
    SOS_CARD = 'sos_card'
    ROLEPLAY = 'roleplay'
    RISK_MAP = 'risk_map'


# Requirement type for achievements counted in consecutive days
STREAK_REQUIREMENT = 'streak'


class Mission:
    """A catalog mission. Immutable once built."""

    __slots__ = ('id', 'type', 'title', 'description', 'duration', 'base_xp', 'is_premium', 'icon')

    def __init__(self, id, type, title, description, duration, base_xp, is_premium=False, icon='Star'):
        if base_xp <= 0:
            raise ValueError(f"Mission {id} must award positive XP")
        object.__setattr__(self, 'id', id)
        object.__setattr__(self, 'type', MissionType(type))
        object.__setattr__(self, 'title', title)
        object.__setattr__(self, 'description', description)
        object.__setattr__(self, 'duration', duration)
        object.__setattr__(self, 'base_xp', base_xp)
        object.__setattr__(self, 'is_premium', is_premium)
        object.__setattr__(self, 'icon', icon)

    def __setattr__(self, name, value):
        raise AttributeError('Catalog missions are read-only')

    def __repr__(self):
        return f'<Mission {self.id}: {self.base_xp} XP>'

    def variant(self, **overrides):
        """Copy of this mission with some fields replaced."""
        fields = {name: getattr(self, name) for name in self.__slots__}
        fields.update(overrides)
        return Mission(**fields)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type.value,
            'title': self.title,
            'description': self.description,
            'duration': self.duration,
            'xp': self.base_xp,
            'is_premium': self.is_premium,
            'icon': self.icon,
        }


# --- Free missions ---

HERO_MISSION = Mission(
    'hero', MissionType.HERO, 'Detecta (H.E.R.O.)',
    'Identifica 1 señal H.E.R.O. en una situación', '60-90s', 20, icon='Search')

CALM_MISSION = Mission(
    'calm', MissionType.CALM, 'Regula (C.A.L.M.)',
    'Haz C.A.L.M. con foco en el paso del día', '2-3 min', 20, icon='Wind')

SCRIPTS_MISSION = Mission(
    'scripts', MissionType.SCRIPTS, 'Scripts de límites',
    'Escoge un script y adáptalo a tu caso', '2-3 min', 25, icon='MessageSquare')

SELFCARE_MISSION = Mission(
    'selfcare', MissionType.SELFCARE, 'Plan de autocuidado',
    'Añade 1 micro-acción de cuidado personal', '1-2 min', 25, icon='Heart')

SUPPORT_MISSION = Mission(
    'support', MissionType.SUPPORT, 'Red de apoyo',
    'Confirma 1 contacto o escribe un mensaje de check-in', '2-3 min', 25, icon='Users')

REVIEW_MISSION = SELFCARE_MISSION.variant(
    id='review', title='Revisión semanal',
    description='Revisa tu progreso y celebra tus victorias')

# --- Premium bonuses ---

SOS_CARD_BONUS = Mission(
    'sos_card', MissionType.SOS_CARD, 'Tarjeta SOS del día',
    'Elige tu Tarjeta SOS y guárdala en favoritas', '1-2 min', 30, is_premium=True, icon='Shield')

ROLEPLAY_BONUS = Mission(
    'roleplay', MissionType.ROLEPLAY, 'Simulador de conversación',
    'Practica 2 turnos de una conversación difícil', '5-7 min', 60, is_premium=True, icon='MessageCircle')

RISK_MAP_BONUS = Mission(
    'risk_map', MissionType.RISK_MAP, 'Semáforo de Riesgo',
    'Evalúa una situación con el Mapa de Riesgo', '5-8 min', 100, is_premium=True, icon='AlertTriangle')

AUDIO_STATE_BONUS = SOS_CARD_BONUS.variant(
    id='audio_state', title='Audio por estado',
    description='Escucha un audio según cómo te sientes', icon='Headphones')


class DayMissions:
    """Required (free) and bonus (premium) missions for one weekday."""

    __slots__ = ('day_of_week', 'required_missions', 'bonus_missions')

    def __init__(self, day_of_week, required_missions, bonus_missions):
        self.day_of_week = day_of_week
        self.required_missions = tuple(required_missions)
        self.bonus_missions = tuple(bonus_missions)

    @property
    def all_missions(self):
        return self.required_missions + self.bonus_missions

    @property
    def required_ids(self):
        return frozenset(m.id for m in self.required_missions)

    def to_dict(self, include_bonus=True):
        return {
            'day_of_week': self.day_of_week,
            'required_missions': [m.to_dict() for m in self.required_missions],
            'bonus_missions': [m.to_dict() for m in self.bonus_missions] if include_bonus else [],
        }


# Keyed by date.weekday(): 0 = Monday ... 6 = Sunday.
# H.E.R.O. and C.A.L.M. every day, one rotating mission, Sunday is review day.
WEEKLY_SCHEDULE: Dict[int, DayMissions] = {
    0: DayMissions(0, [HERO_MISSION, CALM_MISSION, SCRIPTS_MISSION], [SOS_CARD_BONUS]),
    1: DayMissions(1, [HERO_MISSION, CALM_MISSION, SELFCARE_MISSION], [ROLEPLAY_BONUS]),
    2: DayMissions(2, [HERO_MISSION, CALM_MISSION, SUPPORT_MISSION], [RISK_MAP_BONUS]),
    3: DayMissions(3, [HERO_MISSION, CALM_MISSION, SCRIPTS_MISSION], [AUDIO_STATE_BONUS]),
    4: DayMissions(4, [HERO_MISSION, CALM_MISSION, SELFCARE_MISSION], [SOS_CARD_BONUS]),
    5: DayMissions(5, [HERO_MISSION, CALM_MISSION, SUPPORT_MISSION], [ROLEPLAY_BONUS]),
    6: DayMissions(6, [HERO_MISSION, CALM_MISSION, REVIEW_MISSION], [RISK_MAP_BONUS]),
}

MISSIONS_BY_ID: Dict[str, Mission] = {
    mission.id: mission
    for day in WEEKLY_SCHEDULE.values()
    for mission in day.all_missions
}


def get_day_missions(day) -> DayMissions:
    """Schedule entry for a calendar date."""
    return WEEKLY_SCHEDULE[day.weekday()]


def get_mission(mission_id: str) -> Optional[Mission]:
    return MISSIONS_BY_ID.get(mission_id)


# --- Achievements ---

ACHIEVEMENTS: List[dict] = [
    {'id': 'detector', 'label': 'Detector/a', 'description': '10 registros H.E.R.O.',
     'requirement': {'type': 'hero', 'count': 10}, 'icon': 'Search', 'is_premium': False},
    {'id': 'calm_pressure', 'label': 'Calma bajo presión', 'description': '10 C.A.L.M. completados',
     'requirement': {'type': 'calm', 'count': 10}, 'icon': 'Wind', 'is_premium': False},
    {'id': 'limit_said', 'label': 'Límite dicho', 'description': '5 scripts adaptados',
     'requirement': {'type': 'scripts', 'count': 5}, 'icon': 'MessageSquare', 'is_premium': False},
    {'id': 'real_selfcare', 'label': 'Autocuidado real', 'description': '7 días con micro-rutina',
     'requirement': {'type': 'selfcare', 'count': 7}, 'icon': 'Heart', 'is_premium': False},
    {'id': 'circle_active', 'label': 'Círculo activado', 'description': 'Red de apoyo configurada',
     'requirement': {'type': 'support', 'count': 3}, 'icon': 'Users', 'is_premium': False},
    {'id': 'sos_mode', 'label': 'Modo SOS', 'description': '10 tarjetas guardadas',
     'requirement': {'type': 'sos_card', 'count': 10}, 'icon': 'Shield', 'is_premium': True},
    {'id': 'strategist_badge', 'label': 'Estratega', 'description': '5 semáforos de riesgo',
     'requirement': {'type': 'risk_map', 'count': 5}, 'icon': 'Target', 'is_premium': True},
    {'id': 'week_streak', 'label': 'Constancia semanal', 'description': '7 días seguidos',
     'requirement': {'type': STREAK_REQUIREMENT, 'count': 7}, 'icon': 'Flame', 'is_premium': False},
    {'id': 'month_warrior', 'label': 'Guerrero/a del mes', 'description': '30 días de reto',
     'requirement': {'type': STREAK_REQUIREMENT, 'count': 30}, 'icon': 'Trophy', 'is_premium': False},
]

ACHIEVEMENTS_BY_ID: Dict[str, dict] = {a['id']: a for a in ACHIEVEMENTS}
