from .package import Package
from .package_purchase import PackagePurchase

__all__ = ["Package", "PackagePurchase"]
