"""
mphe - multiparty homomorphic encryption primitives

Structure:
- ring.py: reference ring engine (NTT, samplers)
- scheme.py: BFV-style context, keys, encryption and decryption
- pcks.py: collective public key switching protocol
- simulate.py: N-party PCKS round without a network
- plotter.py: noise curves of recorded rounds
"""

from .utils import MPHEError, ParameterError
from .ring import Ring, Poly, GaussianSampler, TernarySampler, UniformSampler
from .scheme import (
    Params,
    PN10QP30,
    Context,
    SecretKey,
    PublicKey,
    Ciphertext,
    KeyGenerator,
    Encryptor,
    Decryptor
)
from .pcks import PCKSProtocol, PCKSShare, SMUDGING_BOUND_FACTOR, TERNARY_DENSITY

__all__ = [
    'MPHEError',
    'ParameterError',
    'Ring',
    'Poly',
    'GaussianSampler',
    'TernarySampler',
    'UniformSampler',
    'Params',
    'PN10QP30',
    'Context',
    'SecretKey',
    'PublicKey',
    'Ciphertext',
    'KeyGenerator',
    'Encryptor',
    'Decryptor',
    'PCKSProtocol',
    'PCKSShare',
    'SMUDGING_BOUND_FACTOR',
    'TERNARY_DENSITY',
]
