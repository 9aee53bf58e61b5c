from dataclasses import dataclass

PATIENT_ROLE = "patient"
DOCTOR_ROLE = "doctor"
NURSE_ROLE = "nurse"
LAB_ROLE = "lab"
PHARMACIST_ROLE = "pharmacist"

USER_ROLES = (NURSE_ROLE, DOCTOR_ROLE, LAB_ROLE, PHARMACIST_ROLE, PATIENT_ROLE)


@dataclass(frozen=True)
class Caller:
    """Authenticated identity a request acts as.

    ``id`` is the user id for staff and doctors, and the linked patient profile id for
    patients, so it can be compared directly with the appointment's references.
    """

    id: int
    role: str

    @property
    def is_patient(self) -> bool:
        return self.role == PATIENT_ROLE

    @property
    def is_doctor(self) -> bool:
        return self.role == DOCTOR_ROLE

    @property
    def is_nurse(self) -> bool:
        return self.role == NURSE_ROLE
