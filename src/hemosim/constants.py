"""
Physical constants, model constants and default scenarios for the
left-ventricle / Windkessel simulator.
"""

# Unit conversions
SVR_TO_WOOD = 80.0  # dyn·s·cm^-5 per mmHg·min/L
SECONDS_PER_MINUTE = 60.0

# Elastance waveform
SYSTOLIC_FRACTION = 0.33  # fraction of the cycle spent in systole
DIASTOLIC_TONE = 0.05  # residual normalized elastance at the start of diastole
DIASTOLIC_DECAY = 3.0

# Valves (mmHg per mL/s, open state)
MITRAL_RESISTANCE = 0.005
AORTIC_RESISTANCE = 0.0025

# Initial arterial pressure seed (mmHg)
ARTERIAL_PRESSURE_SEED = 90.0

# Contractility (0.1..1.0) -> Emax (0.5..4.5 mmHg/mL)
CONTRACTILITY_MIN = 0.1
CONTRACTILITY_MAX = 1.0
EMAX_AT_MIN_CONTRACTILITY = 0.5
EMAX_CONTRACTILITY_SPAN = 4.0

# Simulation defaults
DEFAULT_SIMULATION = {
    "steps_per_beat": 400,  # explicit Euler steps per cardiac cycle
    "beats": 8,             # beats run before the last one is kept
}

# Scenario field names, as written by scenario export
SCENARIO_FIELDS = ("hr", "edv", "esv", "contr", "svr", "comp", "rap", "Emax", "Emin", "V0")

# Preset scenarios
PRESETS = {
    "normal": {
        "hr": 75, "edv": 120, "esv": 50, "contr": 0.5, "svr": 1200,
        "comp": 1.5, "rap": 2, "Emax": 2.0, "Emin": 0.06, "V0": 10,
    },
    "hypertension": {
        "hr": 75, "edv": 120, "esv": 50, "contr": 0.5, "svr": 2000,
        "comp": 1.0, "rap": 5, "Emax": 2.2, "Emin": 0.06, "V0": 10,
    },
    "sepsis": {
        "hr": 120, "edv": 120, "esv": 50, "contr": 0.4, "svr": 400,
        "comp": 2.5, "rap": 1, "Emax": 1.6, "Emin": 0.04, "V0": 10,
    },
    "hfref": {
        "hr": 80, "edv": 160, "esv": 120, "contr": 0.2, "svr": 1200,
        "comp": 1.2, "rap": 6, "Emax": 0.7, "Emin": 0.06, "V0": 10,
    },
    "hfpef": {
        "hr": 70, "edv": 100, "esv": 45, "contr": 0.6, "svr": 1200,
        "comp": 1.0, "rap": 6, "Emax": 2.5, "Emin": 0.18, "V0": 10,
    },
    "tachy": {
        "hr": 140, "edv": 110, "esv": 50, "contr": 0.45, "svr": 1000,
        "comp": 1.3, "rap": 3, "Emax": 1.9, "Emin": 0.06, "V0": 10,
    },
    "brady": {
        "hr": 40, "edv": 140, "esv": 50, "contr": 0.6, "svr": 1400,
        "comp": 1.4, "rap": 3, "Emax": 2.2, "Emin": 0.06, "V0": 10,
    },
}
