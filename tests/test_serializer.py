"""Tests for JSON encoding and decoding."""

import asyncio
import json
from dataclasses import dataclass
from datetime import date, datetime, timezone

import pytest
from pydantic import BaseModel, Field, ValidationError
from swapi import SwapiPeople

from courier import AnyEncodable, DecodingError, EncodingError, JSONDecoder, JSONEncoder, Serializer


class Film(BaseModel):
    title: str
    episode_id: int = Field(alias="episodeId")
    release_date: date
    director: str | None = None


@dataclass
class Planet:
    name: str
    population: int


class TestJSONDecoder:
    def test_decode_model(self, mock_data):
        people = JSONDecoder().decode(SwapiPeople, mock_data)

        assert people.name == "Chewbacca"
        assert people.created == datetime(2014, 12, 10, 16, 42, 45, 66000, tzinfo=timezone.utc)
        assert len(people.films) == 4

    def test_decode_containers(self):
        assert JSONDecoder().decode(list[int], b"[1, 2, 3]") == [1, 2, 3]
        assert JSONDecoder().decode(dict[str, str], b'{"a": "b"}') == {"a": "b"}

    def test_decode_dataclass(self):
        planet = JSONDecoder().decode(Planet, b'{"name": "Kashyyyk", "population": 45000000}')

        assert planet == Planet(name="Kashyyyk", population=45000000)

    def test_lax_by_default(self):
        assert JSONDecoder().decode(Planet, b'{"name": "Kashyyyk", "population": "45"}').population == 45

    def test_strict(self):
        with pytest.raises(ValidationError):
            JSONDecoder(strict=True).decode(Planet, b'{"name": "Kashyyyk", "population": "45"}')


class TestJSONEncoder:
    def test_iso_dates_by_default(self):
        film = Film(title="A New Hope", episodeId=4, release_date=date(1977, 5, 25))

        assert json.loads(JSONEncoder().encode(film)) == {
            "title": "A New Hope",
            "episodeId": 4,
            "release_date": "1977-05-25",
            "director": None,
        }

    def test_datetime_iso(self):
        value = {"at": datetime(2014, 12, 10, 16, 42, 45, tzinfo=timezone.utc)}

        assert json.loads(JSONEncoder().encode(value)) == {"at": "2014-12-10T16:42:45Z"}

    def test_custom_date_encoding(self):
        encoder = JSONEncoder(date_encoding=lambda value: value.strftime("%d/%m/%Y"))
        film = Film(title="A New Hope", episodeId=4, release_date=date(1977, 5, 25))

        assert json.loads(encoder.encode(film))["release_date"] == "25/05/1977"

    def test_custom_date_encoding_nested(self):
        encoder = JSONEncoder(date_encoding=lambda value: int(value.timestamp()))
        value = {"events": [{"at": datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)}]}

        assert json.loads(encoder.encode(value)) == {"events": [{"at": 60}]}

    def test_exclude_none(self):
        film = Film(title="A New Hope", episodeId=4, release_date=date(1977, 5, 25))

        assert "director" not in json.loads(JSONEncoder(exclude_none=True).encode(film))

    def test_field_names(self):
        film = Film(title="A New Hope", episodeId=4, release_date=date(1977, 5, 25))

        assert "episode_id" in json.loads(JSONEncoder(by_alias=False).encode(film))

    def test_indent(self):
        assert JSONEncoder(indent=2).encode({"a": 1}) == b'{\n  "a": 1\n}'


class TestSerializer:
    """Test the lock-guarded serializer."""

    @pytest.mark.asyncio
    async def test_decode(self, mock_data):
        people = await Serializer().decode(SwapiPeople, mock_data)

        assert people.name == "Chewbacca"

    @pytest.mark.asyncio
    async def test_decode_error(self):
        with pytest.raises(DecodingError) as exc_info:
            await Serializer().decode(SwapiPeople, b'{"name": "Chewbacca"}')

        assert exc_info.value.type_name == "SwapiPeople"
        assert isinstance(exc_info.value.cause, ValidationError)
        assert str(exc_info.value).startswith("Failed to decode SwapiPeople")

    @pytest.mark.asyncio
    async def test_decode_invalid_json(self):
        with pytest.raises(DecodingError):
            await Serializer().decode(list[int], b"[1, 2,")

    @pytest.mark.asyncio
    async def test_encode_box(self):
        data = await Serializer().encode(AnyEncodable(Planet(name="Kashyyyk", population=45000000)))

        assert json.loads(data) == {"name": "Kashyyyk", "population": 45000000}

    @pytest.mark.asyncio
    async def test_encode_error(self):
        with pytest.raises(EncodingError) as exc_info:
            await Serializer().encode(AnyEncodable(object()))

        assert exc_info.value.type_name == "object"
        assert exc_info.value.cause is not None

    @pytest.mark.asyncio
    async def test_custom_coders(self):
        class UpperDecoder(JSONDecoder):
            def decode(self, tp, data):
                return super().decode(tp, data.upper())

        serializer = Serializer(decoder=UpperDecoder(), encoder=JSONEncoder(indent=2))

        assert await serializer.decode(list[str], b'["chewie"]') == ["CHEWIE"]
        assert await serializer.encode([1]) == b"[\n  1\n]"

    @pytest.mark.asyncio
    async def test_calls_hold_the_lock(self):
        serializer = Serializer()
        observed = []

        class ObservingDecoder(JSONDecoder):
            def decode(self, tp, data):
                observed.append(serializer._lock.locked())
                return super().decode(tp, data)

        serializer.decoder = ObservingDecoder()

        results = await asyncio.gather(*(serializer.decode(int, str(i).encode()) for i in range(5)))

        assert results == [0, 1, 2, 3, 4]
        assert observed == [True] * 5
        assert not serializer._lock.locked()
