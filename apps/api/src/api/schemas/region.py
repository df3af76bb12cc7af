from pydantic import BaseModel


class RegionItem(BaseModel):
    name: str
    long_name: str
    admin_code: str
    hira_code: str
    districts: list[str]
