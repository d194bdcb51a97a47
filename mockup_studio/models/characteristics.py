"""Model characteristics and their closed option sets."""

from pydantic import BaseModel, Field, field_validator

from ..errors import InvalidCharacteristicError


class Option(BaseModel):
    """A selectable value and the label shown for it."""
    label: str
    value: str


def _options(*pairs: tuple[str, str]) -> list[Option]:
    return [Option(label=label, value=value) for label, value in pairs]


GENDER_OPTIONS = _options(
    ("Woman", "woman"),
    ("Man", "man"),
    ("Non-binary person", "non-binary person"),
    ("Child", "child"),
)

HEIGHT_OPTIONS = _options(
    ("Tall", "tall"),
    ("Average", "average height"),
    ("Short", "short"),
)

BODY_TYPE_OPTIONS = _options(
    ("Athletic", "athletic body"),
    ("Slender", "slender body"),
    ("Average", "average body"),
    ("Curvy", "curvy body"),
    ("Muscular", "muscular body"),
)

ETHNICITY_OPTIONS = _options(
    ("Asian", "Asian"),
    ("Black", "Black"),
    ("Caucasian", "Caucasian"),
    ("Hispanic", "Hispanic"),
    ("Middle Eastern", "Middle Eastern"),
    ("Mixed", "mixed ethnicity"),
)

HAIR_COLOR_OPTIONS = _options(
    ("Blonde", "blonde hair"),
    ("Brown", "brown hair"),
    ("Black", "black hair"),
    ("Red", "red hair"),
    ("Gray", "gray hair"),
    ("Colorful", "colorful dyed hair"),
)

AGE_OPTIONS = _options(
    ("Young Adult (20s)", "in their 20s"),
    ("Adult (30s)", "in their 30s"),
    ("Middle-Aged (40s-50s)", "in their 40s"),
)

POSE_OPTIONS = _options(
    ("Standing", "standing pose"),
    ("Walking", "walking pose"),
    ("Sitting", "sitting pose"),
    ("Leaning", "leaning against a wall"),
    ("Hands in Pockets", "with hands in pockets"),
    ("Side Profile", "side profile pose"),
    ("From the Back", "view from the back"),
    ("Looking Over Shoulder", "looking over the shoulder"),
    ("Candid Action", "candid action pose"),
)

SHOOT_TYPE_OPTIONS = _options(
    ("Full Body", "full-body shot"),
    ("Waist Up", "waist-up shot"),
    ("Portrait", "portrait shot"),
    ("Knee Up", "shot from the knee up"),
)

CHARACTERISTIC_OPTIONS: dict[str, list[Option]] = {
    "gender": GENDER_OPTIONS,
    "height": HEIGHT_OPTIONS,
    "body_type": BODY_TYPE_OPTIONS,
    "ethnicity": ETHNICITY_OPTIONS,
    "hair_color": HAIR_COLOR_OPTIONS,
    "age": AGE_OPTIONS,
    "pose": POSE_OPTIONS,
    "shoot_type": SHOOT_TYPE_OPTIONS,
}


def allowed_values(name: str) -> list[str]:
    if name not in CHARACTERISTIC_OPTIONS:
        raise InvalidCharacteristicError(name, "<unknown attribute>")
    return [option.value for option in CHARACTERISTIC_OPTIONS[name]]


class ModelCharacteristics(BaseModel):
    """The eight categorical attributes describing a synthetic model."""
    
    gender: str = Field(default="woman")
    height: str = Field(default="average height")
    body_type: str = Field(default="average body")
    ethnicity: str = Field(default="Caucasian")
    hair_color: str = Field(default="brown hair")
    age: str = Field(default="in their 20s")
    pose: str = Field(default="standing pose")
    shoot_type: str = Field(default="full-body shot")
    
    @field_validator("*")
    @classmethod
    def _in_option_set(cls, value: str, info) -> str:
        if value not in allowed_values(info.field_name):
            raise ValueError(f"'{value}' is not a valid option for {info.field_name}")
        return value
    
    def with_value(self, name: str, value: str) -> "ModelCharacteristics":
        """Return a copy with one attribute changed.
        
        Raises:
            InvalidCharacteristicError: unknown attribute or value outside its option set
        """
        if name not in CHARACTERISTIC_OPTIONS or value not in allowed_values(name):
            raise InvalidCharacteristicError(name, value)
        return self.model_copy(update={name: value})
