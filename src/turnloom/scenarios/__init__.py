from turnloom.scenarios.sample_world import (
    create_sample_world,
    sample_choices,
    MONTMARTRE,
    LATIN_QUARTER,
    EIFFEL_TOWER,
)

__all__ = [
    'create_sample_world',
    'sample_choices',
    'MONTMARTRE',
    'LATIN_QUARTER',
    'EIFFEL_TOWER',
]
