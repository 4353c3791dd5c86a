"""Built-in contract wording offered when an admin starts a new trip contract."""

DEFAULT_CONTRACT_TEMPLATE = """\
UMOWA OBOZU
zawarta w dniu {{today_date}} w Krakowie pomiędzy:

BIEGUNSPORT Stepaniak & Biegun sp. j. z siedzibą 30-731 Kraków ul. Grochowa 26C,
NIP 6772411396, REGON 366035549, wpisana do rejestru przedsiębiorstw KRS pod numerem 0000651048,
reprezentowana przez wspólnika Kamil Stepaniak, e-mail: biuro@biegunsport.pl.
Wpis do Centralnej Ewidencji Organizatorów Turystyki i Pośredników Turystycznych – 12165-12,
Certyfikat Gwarancji Ubezpieczeniowej TU Europa S.A. – GT 28/2019.
Dane kontaktowe ubezpieczyciela: Towarzystwo Ubezpieczeń Europa S.A., ul. Gwiaździsta 62,
53-413 Wrocław, e-mail: bok@tueuropa.pl, tel.: 801 500 300 lub 71 369 28 87,
adres strony internetowej: https://tueuropa.pl/
dalej zwanym „Organizatorem",
oraz

Pan / Pani: {{parent_name}}
Adres zamieszkania: {{parent_address}}
PESEL: {{parent_pesel}}
E-mail: {{parent_email}}
Telefon: {{parent_phone}}
zwany(a) dalej „Opiekunem";
zwanymi dalej łącznie „Stronami".

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

§ 1 – Przedmiot Umowy

1. Przedmiotem niniejszej umowy (dalej: „Umowa") jest zorganizowanie przez Organizatora na rzecz Uczestnika
   wyjazdu sportowo-rekreacyjnego (dalej: „Obóz"), obejmującego wyjazd: {{trip_title}},
   w terminie {{trip_departure}} – {{trip_return}}, w miejscowości {{trip_location}}.
2. Opiekun oświadcza, że kieruje na Obóz będącego pod jego opieką Uczestnika: {{child_name}},
   ur. {{child_birth_date}} (dalej: „Uczestnik"). Szczegółowe dane Uczestnika wskazane zostały
   w treści Karty Kwalifikacyjnej, stanowiącej załącznik do niniejszej Umowy.

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

§ 2 – Oświadczenia i zobowiązania Stron

1. Organizator oświadcza, że:
   1.1. posiada stosowną wiedzę i doświadczenie niezbędne do przeprowadzenia Obozu;
   1.2. sprzęt sportowy wykorzystywany podczas Obozu jest sprawny i dopuszczony do użytku;
   1.3. odprowadza regularnie składki na Turystyczny Fundusz Gwarancyjny, zgodnie z przepisami
        Ustawy o imprezach turystycznych i powiązanych usługach turystycznych z dnia 24.11.2017 r.
        (Dz.U. z 2017 r., poz. 2361 ze zm.);
   1.4. w ramach Obozu część oferowanych usług turystycznych organizowana jest w grupach
        liczących od 10 do 15 osób;
   1.5. ze względu na charakter Obozu (obóz sportowy) świadczone usługi, co do zasady,
        nie są dostępne dla osób o ograniczonej sprawności ruchowej.
2. Opiekun oświadcza, że:
   2.1. jest świadom, iż Obóz ma charakter sportowy i wymaga od Uczestnika dobrej sprawności
        fizycznej oraz kondycji, a w związku z powyższym nie zachodzą przeciwwskazania
        (m.in. zdrowotne) dla uczestnictwa Uczestnika w Obozie;
   2.2. przed podpisaniem niniejszej Umowy zarówno on, jak i Uczestnik zapoznali się z Regulaminem
        Obozu, OWU w wyjazdach BiegunSport oraz z innymi załącznikami do niniejszej Umowy,
        akceptują ich postanowienia, a Uczestnik został pouczony o obowiązku ich przestrzegania.
3. Organizator zobowiązuje się do:
   3.1. zapewnienia Uczestnikowi noclegu przez okres trwania Obozu;
   3.2. zapewnienia Uczestnikowi wyżywienia (śniadanie, obiadokolacja) przez okres trwania Obozu;
   3.3. zapewnienia Uczestnikowi bezpiecznych warunków wypoczynku i właściwej opieki wychowawczej,
        w tym w zakresie higieny, zdrowia oraz innych czynności opiekuńczych;
   3.4. zapewnienia Uczestnikowi opieki ze strony stosownej kadry opiekunów;
   3.5. zapewnienia Uczestnikowi opieki medycznej;
   3.6. zapewnienia Uczestnikowi ubezpieczenia od NNW;
   3.7. należytego wykonania wszystkich objętych Umową usług turystycznych;
   3.8. udzielenia pomocy poszkodowanemu Uczestnikowi w czasie trwania Obozu, w tym udzielenia
        informacji dotyczących świadczeń zdrowotnych, władz lokalnych oraz pomocy konsularnej.
4. Opiekun zobowiązuje się do:
   4.1. zapewnienia odpowiedniego wyposażenia sportowego Uczestnika, będącego w dobrym stanie
        technicznym i posiadającego wszelkie wymagane prawem właściwości techniczne;
   4.2. zapewnienia niezbędnej ilości leków lub innych środków medycznych, w razie ich stosowania
        przez Uczestnika;
   4.3. pokrycia szkód powstałych z przyczyn leżących po stronie Uczestnika w trakcie trwania Obozu;
   4.4. uiszczenia Ceny Obozu w wysokości i w sposób określony w § 3 Umowy;
   4.5. dostarczenia i odebrania Uczestnika na i z miejsca zbiórki;
   4.6. niezwłocznego poinformowania Organizatora o wszelkich stwierdzonych przypadkach
        niewykonania lub nienależytego wykonania niniejszej Umowy.

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

§ 3 – Cena i warunki finansowe

{{payment_schedule}}

Płatności dokonywane są przelewem na rachunek bankowy Organizatora lub gotówką:
  PLN: {{trip_bank_pln}}
  EUR: {{trip_bank_eur}}
  BiegunSport Stepaniak & Biegun sp. j., ul. Grochowa 26C, 30-731 Kraków

W tytule przelewu należy podać imię i nazwisko Uczestnika oraz nazwę Obozu.

Brak dokonania przez Opiekuna którejkolwiek z wpłat w ustalonych terminach uznaje się
za rezygnację z Obozu z przyczyn nieleżących po stronie Organizatora.

Organizator oraz Opiekun mają prawo do odpowiednio podwyższenia i obniżenia Ceny Obozu
na zasadach określonych w „OWU w wyjazdach BiegunSport".

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

§ 4 – Postanowienia końcowe

1. Wszelkie zmiany, uzupełnienia lub rozwiązanie niniejszej Umowy wymagają formy pisemnej
   pod rygorem nieważności.
2. Prawem właściwym dla zobowiązań wynikających z niniejszej Umowy jest prawo polskie.
3. Wszelkie użyte w niniejszej Umowie tytuły pełnią wyłącznie funkcję porządkującą
   i pozostają bez wpływu na interpretację jej postanowień.
4. Następujące kwestie uregulowane zostały szczegółowo w treści OWU w wyjazdach BiegunSport,
   stanowiącym załącznik i integralną część niniejszej Umowy:
   a. Obowiązki Uczestnika;
   b. Ochrona zdrowia i życia Uczestnika;
   c. Cena i sposób płatności;
   d. Zmiana Umowy;
   e. Rozwiązanie Umowy oraz przeniesienie praw do uczestnictwa na osobę trzecią;
   f. Odpowiedzialność Organizatora za niewykonanie lub nienależyte wykonanie Umowy;
   g. Reklamacje oraz pozasądowe rozstrzyganie sporów;
   h. Ubezpieczenie;
   i. Przetwarzanie danych osobowych.
5. W sprawach nie uregulowanych Umową lub załącznikami mają zastosowanie przepisy Ustawy
   o usługach turystycznych, Ustawy o systemie oświaty, Kodeksu cywilnego oraz innych
   relewantnych ustaw.
6. Umowa została sporządzona w formie elektronicznej, w języku polskim.
7. W trakcie Obozu osobami do kontaktu w imieniu Organizatora są:
   Karol Biegun        – tel. +48 788 299 500
   Kamil Stepaniak     – tel. +48 603 303 619
8. Bezpośredni kontakt Opiekuna z Uczestnikiem możliwy jest na zasadach określonych
   w Regulaminie Obozu, stanowiącym załącznik do niniejszej Umowy.
9. Integralną część Umowy stanowią następujące załączniki (dostępne na https://biegunsport.pl/o-nas/dokumenty/):
   – Załącznik 1: Karta Kwalifikacyjna
   – Załącznik 2: Regulamin Obozu
   – Załącznik 3: OWU w wyjazdach BiegunSport
   – Załącznik 4: Program Obozu
   – Załącznik 5: Pisemne potwierdzenie posiadania gwarancji ubezpieczeniowej

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

AKCEPTACJA UMOWY

Akceptując niniejszą umowę elektronicznie, Opiekun potwierdza, że:
– zapoznał się z pełną treścią Umowy,
– zapoznał się z Ogólnymi Warunkami Uczestnictwa (OWU) i akceptuje ich postanowienia,
– wyraża zgodę na udział Uczestnika w Obozie na warunkach określonych w Umowie,
– wszystkie podane dane są prawdziwe i aktualne.

Organizator: BIEGUNSPORT Stepaniak & Biegun sp. j.
Opiekun: {{parent_name}}
Uczestnik: {{child_name}}

Data wygenerowania umowy: {{today_date}}

BiegunSport Stepaniak & Biegun sp. j. | ul. Grochowa 26C, 30-731 Kraków
biuro@biegunsport.pl | www.biegunsport.pl | tel. +48 603 303 619
"""
