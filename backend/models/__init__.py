from models.users import User
from models.book import Book
from models.sale import Sale, SaleItem, SaleStatusHistory
from models.payment_claim import PaymentClaim
from models.store_settings import StoreSettings
from models.log import Log
from models.inquiry import Inquiry, InquiryItem
