"""Tests for registry SQLAlchemy models."""

from resource_registry.db.models import (
    ListingCategoryModel,
    ListingCollaboratorModel,
    ListingModel,
    ListingVerificationModel,
    RegistryStateModel,
)


class TestListingModel:
    """Tests for ListingModel."""

    def test_metadata_column_is_mapped_to_listing_metadata(self):
        columns = {c.name for c in ListingModel.__table__.columns}
        assert "metadata" in columns
        assert "update_count" in columns

    def test_to_dict_uses_external_field_names(self):
        listing = ListingModel(
            listing_id=7,
            owner="ngo_1",
            resource_type="water",
            quantity=20,
            unit="l",
            location="Lagos",
            expiration=None,
            price=5,
            description="Bottled water",
            listing_metadata='{"sealed": true}',
            status="active",
            created_at=100,
            last_updated=100,
        )

        data = listing.to_dict()

        assert data["listing_id"] == 7
        assert data["metadata"] == '{"sealed": true}'
        assert data["status"] == "active"
        assert "update_count" not in data

    def test_persists_and_reads_back(self, db_session):
        db_session.add(
            ListingModel(
                listing_id=1,
                owner="ngo_1",
                resource_type="food",
                quantity=1,
                unit="kg",
                location="",
                description="",
                status="active",
                created_at=1,
                last_updated=1,
            )
        )
        db_session.commit()

        found = db_session.get(ListingModel, 1)
        assert found.owner == "ngo_1"
        assert found.update_count == 0


class TestSatelliteModels:
    """Tests for category, collaborator, verification and state rows."""

    def test_collaborator_primary_key(self):
        pk = [c.name for c in ListingCollaboratorModel.__table__.primary_key.columns]
        assert pk == ["listing_id", "principal"]

    def test_category_to_dict(self):
        category = ListingCategoryModel(
            listing_id=1, category="essentials", tags=["donation"]
        )
        assert category.to_dict() == {
            "listing_id": 1,
            "category": "essentials",
            "tags": ["donation"],
        }

    def test_verification_to_dict(self):
        verification = ListingVerificationModel(
            listing_id=1,
            verified_by="verifier",
            verification_notes="Checked",
            verified_at=120,
        )
        assert verification.to_dict()["verified_by"] == "verifier"

    def test_state_to_dict(self):
        state = RegistryStateModel(
            id=1, paused=False, admin="deployer", next_listing_id=1, block_height=0
        )
        assert state.to_dict() == {
            "paused": False,
            "admin": "deployer",
            "next_listing_id": 1,
            "block_height": 0,
        }
