# Natural units (G = c = 1)
G = 1.0
C = 1.0
M = 1.0
RS = 2.0 * G * M / (C * C)  # Schwarzschild radius

ESCAPE_RADIUS = 20.0
STEP_SIZE = 0.05  # dt per integrator step

# Accretion disk
DISK_INNER = 2.6  # Just outside the event horizon
DISK_OUTER = 12.0

# Upper bound on integrator steps for a single photon
MAX_STEPS = 100_000

# Outcome colours (r, g, b)
BLACK_HOLE_COLOR = (5, 5, 8)
DISK_COLOR = (255, 170, 60)
SKY_COLOR = (10, 12, 30)
ERROR_COLOR = (255, 0, 255)

WIDTH = 800
HEIGHT = 600
FALLBACK_WORKERS = 4

# Interactive view traces at this resolution and lets the texture scale it up
COMPUTE_WIDTH = 100
COMPUTE_HEIGHT = 75
