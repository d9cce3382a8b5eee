import os, sys, pickle

class STATUS:
    SUCCESS = 0
    FAILURE = 1

    def failed(expr):
        return expr == STATUS.FAILURE
    def success(expr):
        return expr == STATUS.SUCCESS

class DEBUG_LEVEL:
    NONE = 0
    ERRORS = 1
    WARNS = 2
    INFO = 3
    ALL = 4

class TERM:
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'

    def write(msg):
        sys.stdout.write(TERM.ENDC + msg + TERM.ENDC + '\n')

    def write_info(msg):
        sys.stdout.write(TERM.OKCYAN + msg + TERM.ENDC + '\n')

    def write_success(msg):
        sys.stdout.write(TERM.OKGREEN + msg + TERM.ENDC + '\n')

    def write_failure(msg):
        sys.stdout.write(TERM.FAIL + msg + TERM.ENDC + '\n')

    def write_warning(msg):
        sys.stdout.write(TERM.WARNING + msg + TERM.ENDC + '\n')

    # Writes msg only if the configured debug level allows it
    def trace(level, msg):
        if debug_level >= level:
            TERM.write(msg)

### Errors ###

class MPHEError(Exception):
    pass

# Malformed parameters or mismatched operands (contract violation, never recovered)
class ParameterError(MPHEError, ValueError):
    pass

def check(expr, msg, *args):
    if not expr:
        raise ParameterError(msg.format(*args))

### Configuration ###

def _load_debug_level():
    value = os.getenv('MPHE_DEBUG_LEVEL')
    if not value:
        return DEBUG_LEVEL.WARNS

    value = value.strip()
    if value.isdigit():
        return min(int(value), DEBUG_LEVEL.ALL)

    return getattr(DEBUG_LEVEL, value.upper(), DEBUG_LEVEL.WARNS)

debug_level = _load_debug_level()

# Seed for reproducibility
SEED = 2020204

# Standard deviation of the smudging noise used by the simulation
DEFAULT_SMUDGING_SIGMA = float(2**10)

# Stand-in for the transport layer: shares only ever leave a party serialized
def simulate_network_comm(data):
    pdata = pickle.dumps(data)
    return pickle.loads(pdata)
