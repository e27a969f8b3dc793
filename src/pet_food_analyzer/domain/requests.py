"""Incoming request payloads."""

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class CreateAnalysisRequest(BaseModel):
    """Create-analysis submission.

    Field presence depends on the mode and is checked by the analysis
    service, so every mode-dependent field is optional here.
    """

    model_config = ConfigDict(populate_by_name=True)

    is_manual: bool = Field(alias="isManual")
    product_name: str | None = Field(default=None, alias="productName")
    product_url: str | None = Field(default=None, alias="productUrl")
    ingredients_text: str | None = Field(default=None, alias="ingredientsText")
    species: str | None = None
    breed: str | None = None
    age: StrictInt | None = None
    additional_info: str | None = Field(default=None, alias="additionalInfo")
