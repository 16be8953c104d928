"""
Configuration management using Pydantic models loaded from YAML.
"""

import datetime
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import (
    DEFAULT_TIME_SLOT_DURATION,
    Appointment,
    AppointmentStatus,
    WeeklySchedule,
    weekday_from_name,
)
from .domain.time_slots import is_valid_time_slot_format

MIN_SLOT_DURATION = 15
MAX_SLOT_DURATION = 120


def _validate_slot_duration(value: int) -> int:
    if not MIN_SLOT_DURATION <= value <= MAX_SLOT_DURATION:
        raise ValueError(
            f"time_slot_duration must be between {MIN_SLOT_DURATION} and {MAX_SLOT_DURATION}, got {value}"
        )
    return value


class DefaultsConfig(BaseModel):
    """Defaults applied to every doctor."""
    time_slot_duration: int = DEFAULT_TIME_SLOT_DURATION
    cancellation_notice_hours: int = 24
    # None lifts the limit
    max_advance_days: Optional[int] = 90

    @field_validator("time_slot_duration")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        return _validate_slot_duration(value)

    @field_validator("cancellation_notice_hours")
    @classmethod
    def validate_notice(cls, value: int) -> int:
        """Ensure the notice period is not negative."""
        if value < 0:
            raise ValueError("cancellation_notice_hours must not be negative")
        return value

    @field_validator("max_advance_days")
    @classmethod
    def validate_max_advance_days(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("max_advance_days must not be negative")
        return value


class DoctorConfig(BaseModel):
    """A doctor and their weekly working hours."""
    id: str
    name: str
    time_slot_duration: Optional[int] = None
    # Weekday name or 0=Sunday index -> JSON text, "HH:mm-HH:mm" or a mapping
    schedule: Dict[Union[int, str], Union[str, Dict[str, Any], None]] = Field(default_factory=dict)

    @field_validator("time_slot_duration")
    @classmethod
    def validate_duration(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value
        return _validate_slot_duration(value)

    @field_validator("schedule")
    @classmethod
    def validate_schedule_keys(cls, value: Dict[Any, Any]) -> Dict[int, Any]:
        """Normalize weekday keys to their 0=Sunday index."""
        normalized: Dict[int, Any] = {}
        for key, day in value.items():
            if isinstance(key, int) or (isinstance(key, str) and key.strip().isdigit()):
                index = int(key)
                if index not in range(7):
                    raise ValueError(f"Weekday index must be between 0 and 6, got {index}")
            else:
                index = weekday_from_name(key)
            if index in normalized:
                raise ValueError(f"Weekday configured twice: {key}")
            normalized[index] = day
        return normalized

    def weekly_schedule(self, default_duration: int = DEFAULT_TIME_SLOT_DURATION) -> WeeklySchedule:
        """
        Build the doctor's ``WeeklySchedule``.

        Mappings are stored as JSON text so every day goes through the same
        parser as schedules saved by the booking backend.
        """
        days = {
            index: json.dumps(day) if isinstance(day, dict) else day
            for index, day in self.schedule.items()
        }
        return WeeklySchedule(
            days=days,
            time_slot_duration=self.time_slot_duration or default_duration,
        )


class AppointmentConfig(BaseModel):
    """An existing appointment, used to seed the in-memory store."""
    doctor_id: str
    date: datetime.date
    time_slot: str
    status: AppointmentStatus = AppointmentStatus.PENDING

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, value: str) -> str:
        if not is_valid_time_slot_format(value):
            raise ValueError(f"time_slot must look like HH:mm-HH:mm, got {value!r}")
        return value

    def to_appointment(self) -> Appointment:
        return Appointment(
            doctor_id=self.doctor_id,
            date=self.date,
            time_slot=self.time_slot,
            status=self.status,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    doctors: List[DoctorConfig] = Field(default_factory=list)
    appointments: List[AppointmentConfig] = Field(default_factory=list)

    @field_validator("doctors")
    @classmethod
    def validate_doctors(cls, value: List[DoctorConfig]) -> List[DoctorConfig]:
        """Ensure doctor ids and names are unique."""
        seen_ids: set[str] = set()
        seen_names: set[str] = set()
        for doctor in value:
            name_key = doctor.name.lower()
            if doctor.id in seen_ids:
                raise ValueError(f"Duplicate doctor id detected: {doctor.id}")
            if name_key in seen_names:
                raise ValueError(f"Duplicate doctor name detected: {doctor.name}")
            seen_ids.add(doctor.id)
            seen_names.add(name_key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_doctor(self, identifier: str) -> Optional[DoctorConfig]:
        """Find a doctor by id or by name (case-insensitive)."""
        for doctor in self.doctors:
            if doctor.id == identifier or doctor.name.lower() == identifier.lower():
                return doctor
        return None

    def slot_duration_for(self, doctor: DoctorConfig) -> int:
        return doctor.time_slot_duration or self.defaults.time_slot_duration


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
