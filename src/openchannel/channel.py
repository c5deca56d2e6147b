from dataclasses import dataclass, field
import numpy as np
from . import hydraulics
from .constants import MANNING_SI
from .cross_section import TrapezoidalSection
from .errors import DomainError


@dataclass(frozen=True)
class Channel:
    """
    Prismatic channel with hydraulic and geometric attributes.

    Attributes
    ----------
    bed_slope : float
        Longitudinal bed slope S0 (positive when the bed falls downstream).
    roughness : float
        Manning's roughness coefficient n.
    width : float
        Bottom width w.
    side_slope : float
        Side slope m (horizontal run per unit rise).
    Cm : float
        Unit constant of Manning's equation (1.0 SI, 1.486 US customary).
    """
    bed_slope: float
    roughness: float
    width: float
    side_slope: float = 0.0
    Cm: float = MANNING_SI
    section: TrapezoidalSection = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not np.isfinite(self.roughness) or self.roughness <= 0:
            raise DomainError(f"Manning's roughness must be positive, got {self.roughness}.")
        if not np.isfinite(self.Cm) or self.Cm <= 0:
            raise DomainError(f"Manning's unit constant must be positive, got {self.Cm}.")
        if not np.isfinite(self.bed_slope):
            raise DomainError(f"Bed slope must be finite, got {self.bed_slope}.")

        object.__setattr__(self, 'section', TrapezoidalSection(b=self.width, m=self.side_slope))

    def area(self, y):
        return self.section.area(y)

    def top_width(self, y):
        return self.section.top_width(y)

    def hydraulic_radius(self, y):
        return self.section.hydraulic_radius(y)

    def conveyance(self, y):
        A, P, R, T = self.section.properties(y)
        return hydraulics.conveyance(A=A, n=self.roughness, R=R, Cm=self.Cm)

    def dK_dy(self, y):
        A, P, R, T = self.section.properties(y)
        return hydraulics.dK_dy(A=A, T=T, n=self.roughness, R=R, dR_dy=self.section.dR_dy(y), Cm=self.Cm)

    def normal_flow(self, y):
        """Discharge for which y is the normal depth."""
        return hydraulics.normal_flow(bed_slope=self.bed_slope, K=self.conveyance(y))

    def dQn_dy(self, y):
        return hydraulics.dQn_dy(bed_slope=self.bed_slope, dK_dy_=self.dK_dy(y))

    def friction_slope(self, y, Q):
        return hydraulics.Sf(Q=Q, K=self.conveyance(y))

    def dSf_dy(self, y, Q):
        return hydraulics.dSf_dy(Q=Q, K=self.conveyance(y), dK_dy_=self.dK_dy(y))

    def froude(self, y, Q, g: float):
        A, P, R, T = self.section.properties(y)
        return hydraulics.froude_num(T=T, A=A, Q=Q, g=g)

    def specific_energy(self, y, Q, g: float):
        return hydraulics.specific_energy(y=y, A=self.area(y), Q=Q, g=g)

    def kinematic_celerity(self, y):
        return hydraulics.kinematic_celerity(T=self.top_width(y), dQn_dy_=self.dQn_dy(y))

    def dynamic_celerity(self, y, Q, g: float):
        A, P, R, T = self.section.properties(y)
        return hydraulics.dynamic_celerity(T=T, A=A, Q=Q, g=g)
