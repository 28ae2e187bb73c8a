"""
Free package endpoints: admin-issued and public promo packages.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_booking.db.session import get_db
from lesson_booking.schemas.package import AdminPackageRequest, PromoPackageRequest, PackageIssuedResponse
from lesson_booking.services.package_service import issue_admin_package, issue_promo_package

router = APIRouter(tags=["Packages"])


@router.post("/create-free-admin-package", response_model=PackageIssuedResponse)
async def create_free_admin_package(
    package_data: AdminPackageRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue a free package of any size. Requires the admin promo code."""
    package = await issue_admin_package(db, package_data)
    return PackageIssuedResponse(
        package_code=package.code,
        message="Admin free package created successfully",
    )


@router.post("/create-free-package", response_model=PackageIssuedResponse)
async def create_free_package(
    package_data: PromoPackageRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue a free single-lesson package for a promo code."""
    package = await issue_promo_package(db, package_data)
    return PackageIssuedResponse(
        package_code=package.code,
        message="Free lesson package created successfully",
    )


@router.options("/create-free-admin-package", include_in_schema=False)
@router.options("/create-free-package", include_in_schema=False)
async def packages_preflight():
    return Response(status_code=200)
